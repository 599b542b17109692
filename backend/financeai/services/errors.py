"""
Application exceptions.

Raised by the chat core and the completion gateway; translated to HTTP
responses by the handlers registered in financeai.main.
"""


class FinanceAIError(Exception):
    """Base exception for the chat core."""


class Unauthenticated(FinanceAIError):
    """Raised when an operation requires a caller identity and none was given."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class Forbidden(FinanceAIError):
    """Raised when the chat does not exist or belongs to another user."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFound(Forbidden):
    """Raised when a chat is absent from the caller's ordered chat list.

    A Forbidden subtype: callers that only care about access denial can catch
    Forbidden, while the API still answers 404.
    """

    def __init__(self, resource_id: object, message: str | None = None):
        self.resource_id = resource_id
        super().__init__(message or f"Chat '{resource_id}' not found")


class InvalidInput(FinanceAIError):
    """Raised for blank titles or blank message content."""


class GatewayError(FinanceAIError):
    """Base class for completion gateway failures."""


class GatewayUnavailable(GatewayError):
    """Missing credential, non-2xx response, or transport failure."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class GatewayTimeout(GatewayError):
    """Raised when a completion request exceeds the configured time bound."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Completion gateway timed out after {timeout_seconds:.0f}s")
