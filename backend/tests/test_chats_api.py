"""End-to-end tests for the /chats routes."""

from uuid import uuid4

from financeai.api.deps import create_access_token
from financeai.services.chat_service import REPLY_FALLBACK_TEXT
from financeai.services.errors import GatewayTimeout, GatewayUnavailable


async def _create(client, headers, title=None) -> dict:
    body = {} if title is None else {"title": title}
    response = await client.post("/chats", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _titles(client, headers) -> list[str]:
    response = await client.get("/chats", headers=headers)
    return [c["title"] for c in response.json()["chats"]]


async def test_health(client) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# =============================================================================
# AUTH BEHAVIOUR
# =============================================================================


async def test_list_without_auth_is_empty(client) -> None:
    response = await client.get("/chats")

    assert response.status_code == 200
    assert response.json() == {"chats": [], "total": 0}


async def test_list_with_invalid_token_is_empty(client) -> None:
    response = await client.get("/chats", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 200
    assert response.json()["total"] == 0


async def test_create_without_auth_is_401(client) -> None:
    response = await client.post("/chats", json={"title": "Budget Plan"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated"}


async def test_token_for_unknown_user_is_unauthenticated(client, auth_headers) -> None:
    response = await client.post("/chats", json={}, headers=auth_headers(uuid4()))

    assert response.status_code == 401


async def test_cookie_auth_is_accepted(client, user) -> None:
    token = create_access_token(user.id)

    response = await client.post(
        "/chats", json={"title": "via cookie"}, headers={"Cookie": f"access_token={token}"}
    )

    assert response.status_code == 201
    assert response.json()["owner_id"] == str(user.id)


# =============================================================================
# ORDERING
# =============================================================================


async def test_create_and_list(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)

    first = await _create(client, headers, "Budget Plan")
    second = await _create(client, headers)

    assert first["position"] == 1
    assert first["brief"] is None
    assert first["brief_items"] == []
    assert second["title"] == "New Chat"
    assert second["position"] == 2
    assert await _titles(client, headers) == ["Budget Plan", "New Chat"]


async def test_rename(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers)

    response = await client.patch(f"/chats/{chat['id']}", json={"title": " Taxes "}, headers=headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Taxes"


async def test_rename_blank_title_is_422(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers, "Budget Plan")

    response = await client.patch(f"/chats/{chat['id']}", json={"title": "  "}, headers=headers)

    assert response.status_code == 422
    assert await _titles(client, headers) == ["Budget Plan"]


async def test_move_up(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    await _create(client, headers, "A")
    b = await _create(client, headers, "B")
    await _create(client, headers, "C")

    response = await client.post(f"/chats/{b['id']}/move", json={"direction": "up"}, headers=headers)

    assert response.status_code == 200
    chats = response.json()["chats"]
    assert [(c["title"], c["position"]) for c in chats] == [("B", 1), ("A", 2), ("C", 3)]


async def test_move_unknown_chat_is_404(client, user, auth_headers) -> None:
    response = await client.post(
        f"/chats/{uuid4()}/move", json={"direction": "down"}, headers=auth_headers(user.id)
    )

    assert response.status_code == 404


async def test_move_invalid_direction_is_422(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers, "A")

    response = await client.post(f"/chats/{chat['id']}/move", json={"direction": "left"}, headers=headers)

    assert response.status_code == 422


async def test_reorder(client, user, other_user, auth_headers) -> None:
    headers = auth_headers(user.id)
    a = await _create(client, headers, "A")
    b = await _create(client, headers, "B")
    c = await _create(client, headers, "C")
    foreign = await _create(client, auth_headers(other_user.id), "X")

    response = await client.post(
        "/chats/reorder",
        json={"ordered_ids": [c["id"], foreign["id"], a["id"], b["id"]]},
        headers=headers,
    )

    assert response.status_code == 200
    chats = response.json()["chats"]
    assert [(ch["title"], ch["position"]) for ch in chats] == [("C", 1), ("A", 2), ("B", 3)]
    assert await _titles(client, auth_headers(other_user.id)) == ["X"]


async def test_reorder_without_auth_is_401(client) -> None:
    response = await client.post("/chats/reorder", json={"ordered_ids": [str(uuid4())]})

    assert response.status_code == 401


async def test_drag(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    a = await _create(client, headers, "A")
    await _create(client, headers, "B")
    c = await _create(client, headers, "C")

    response = await client.post(f"/chats/{a['id']}/drag", json={"target_id": c["id"]}, headers=headers)

    assert response.status_code == 200
    assert [ch["title"] for ch in response.json()["chats"]] == ["B", "C", "A"]


# =============================================================================
# OWNERSHIP ISOLATION
# =============================================================================


async def test_other_user_cannot_touch_chat(client, gateway, user, other_user, auth_headers) -> None:
    chat = await _create(client, auth_headers(user.id), "Budget Plan")
    await client.post(
        f"/chats/{chat['id']}/messages",
        json={"role": "user", "content": "secret"},
        headers=auth_headers(user.id),
    )
    intruder = auth_headers(other_user.id)

    rename = await client.patch(f"/chats/{chat['id']}", json={"title": "mine"}, headers=intruder)
    move = await client.post(f"/chats/{chat['id']}/move", json={"direction": "up"}, headers=intruder)
    append = await client.post(
        f"/chats/{chat['id']}/messages", json={"role": "user", "content": "hi"}, headers=intruder
    )
    reply = await client.post(f"/chats/{chat['id']}/reply", json={"messages": []}, headers=intruder)
    summarize = await client.post(f"/chats/{chat['id']}/summarize", headers=intruder)
    listing = await client.get(f"/chats/{chat['id']}/messages", headers=intruder)

    assert rename.status_code == 403
    assert move.status_code == 404
    assert append.status_code == 403
    assert reply.status_code == 403
    assert summarize.status_code == 403
    assert listing.status_code == 200
    assert listing.json() == []
    assert gateway.calls == []


# =============================================================================
# MESSAGES AND COMPLETIONS
# =============================================================================


async def test_append_and_list_messages(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers, "Budget Plan")

    for role, content in [("user", "What is ROE?"), ("assistant", "Return on equity.")]:
        response = await client.post(
            f"/chats/{chat['id']}/messages", json={"role": role, "content": content}, headers=headers
        )
        assert response.status_code == 201

    response = await client.get(f"/chats/{chat['id']}/messages", headers=headers)

    assert response.status_code == 200
    assert [(m["role"], m["content"]) for m in response.json()] == [
        ("user", "What is ROE?"),
        ("assistant", "Return on equity."),
    ]


async def test_append_rejects_system_role(client, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers)

    response = await client.post(
        f"/chats/{chat['id']}/messages", json={"role": "system", "content": "x"}, headers=headers
    )

    assert response.status_code == 422


async def test_reply_stores_generated_message(client, gateway, user, auth_headers) -> None:
    gateway.reply = "ROE = Net Income / Equity"
    headers = auth_headers(user.id)
    chat = await _create(client, headers, "Budget Plan")

    response = await client.post(
        f"/chats/{chat['id']}/reply",
        json={"messages": [{"role": "user", "content": "What is ROE?"}]},
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["role"] == "assistant"
    assert response.json()["content"] == "ROE = Net Income / Equity"


async def test_reply_gateway_failure_is_fail_soft(client, gateway, user, auth_headers) -> None:
    gateway.error = GatewayUnavailable("OpenRouter error: boom", status_code=500)
    headers = auth_headers(user.id)
    chat = await _create(client, headers)

    response = await client.post(
        f"/chats/{chat['id']}/reply",
        json={"messages": [{"role": "user", "content": "hi"}]},
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["content"] == REPLY_FALLBACK_TEXT


async def test_send(client, gateway, user, auth_headers) -> None:
    gateway.reply = "Keep an emergency fund."
    headers = auth_headers(user.id)
    chat = await _create(client, headers)

    response = await client.post(
        f"/chats/{chat['id']}/send", json={"message": "Where do I start?"}, headers=headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user_message"]["content"] == "Where do I start?"
    assert body["reply"]["content"] == "Keep an emergency fund."
    listing = await client.get(f"/chats/{chat['id']}/messages", headers=headers)
    assert len(listing.json()) == 2


async def test_summarize_stores_brief(client, gateway, user, auth_headers) -> None:
    gateway.reply = "- Goal: retire early\n* Topics: index funds\n\n• Next: open an IRA"
    headers = auth_headers(user.id)
    chat = await _create(client, headers)

    response = await client.post(f"/chats/{chat['id']}/summarize", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["brief"].startswith("- Goal: retire early")
    assert body["brief_items"] == [
        "Goal: retire early",
        "Topics: index funds",
        "Next: open an IRA",
    ]


async def test_summarize_accepts_model_override(client, gateway, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers)

    response = await client.post(
        f"/chats/{chat['id']}/summarize", json={"model": "openai/gpt-4o-mini"}, headers=headers
    )

    assert response.status_code == 200
    assert gateway.calls[0]["model"] == "openai/gpt-4o-mini"


async def test_summarize_gateway_unavailable_is_502(client, gateway, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers)
    gateway.error = GatewayUnavailable("OpenRouter API key not configured. Set OPENROUTER_API_KEY.")

    response = await client.post(f"/chats/{chat['id']}/summarize", headers=headers)

    assert response.status_code == 502
    listing = await client.get("/chats", headers=headers)
    assert listing.json()["chats"][0]["brief"] is None


async def test_summarize_gateway_timeout_is_504(client, gateway, user, auth_headers) -> None:
    headers = auth_headers(user.id)
    chat = await _create(client, headers)
    gateway.error = GatewayTimeout(30)

    response = await client.post(f"/chats/{chat['id']}/summarize", headers=headers)

    assert response.status_code == 504
