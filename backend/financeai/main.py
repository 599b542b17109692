"""
FinanceAI FastAPI Application Entry Point.

Run with: uvicorn financeai.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from financeai.api.routes import auth, chats
from financeai.config import configure_logging, get_settings, sanitize_error
from financeai.services.errors import (
    Forbidden,
    GatewayTimeout,
    GatewayUnavailable,
    InvalidInput,
    NotFound,
    Unauthenticated,
)

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    configure_logging(settings)
    logger.info("%s starting (%s)", settings.app_name, settings.environment)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Finance-advice chat API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(chats.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(Unauthenticated)
async def unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(
        status_code=422, content={"detail": str(exc)}
    )


@app.exception_handler(GatewayUnavailable)
async def gateway_unavailable_handler(request: Request, exc: GatewayUnavailable) -> JSONResponse:
    logger.warning("Completion gateway unavailable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": sanitize_error(exc, generic_message="The AI service is unavailable."),
        },
    )


@app.exception_handler(GatewayTimeout)
async def gateway_timeout_handler(request: Request, exc: GatewayTimeout) -> JSONResponse:
    logger.warning("Completion gateway timed out: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={"detail": sanitize_error(exc, generic_message="The AI service timed out.")},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
