"""End-to-end tests of the relay API with the provider and chat API mocked."""

import json
from urllib.parse import parse_qs, quote, urlsplit

import httpx
import pytest

from oauth import challenge_for
from tests.conftest import CHAT_MODEL, CLIENT_ID, REDIRECT_URI, SYSTEM_PROMPT, login
from tests.fixtures.mock_http import AUTHORIZE_URL, CHAT_API_URL, read_form, token_payload


def chat_route(oauth_provider, **kwargs):
    return oauth_provider.post(CHAT_API_URL, name="chat").mock(**kwargs)


@pytest.mark.integration
def test_health_reports_session_state(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")
    assert body["authenticated"] is False
    assert body["tokenExpired"] is True


@pytest.mark.integration
def test_status_before_login(client):
    response = client.get("/auth/status")

    assert response.json() == {"authenticated": False, "tokenExpired": True, "expiresAt": None}


@pytest.mark.integration
def test_login_redirects_to_provider(client):
    response = client.get("/auth/login", follow_redirects=False)

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(AUTHORIZE_URL + "?")
    query = parse_qs(urlsplit(location).query)
    assert query["response_type"] == ["code"]
    assert query["client_id"] == [CLIENT_ID]
    assert query["redirect_uri"] == [REDIRECT_URI]
    assert query["code_challenge_method"] == ["S256"]
    assert len(query["state"][0]) == 32
    assert len(query["code_challenge"][0]) == 43


@pytest.mark.integration
def test_login_callback_and_status(client, token_endpoint):
    login_response = client.get("/auth/login", follow_redirects=False)
    query = parse_qs(urlsplit(login_response.headers["location"]).query)

    callback = client.get(
        "/auth/callback",
        params={"code": "auth-code", "state": query["state"][0]},
        follow_redirects=False,
    )

    assert callback.status_code == 302
    assert callback.headers["location"] == "/?auth_success=true"

    form = token_endpoint.forms[0]
    assert form["grant_type"] == "authorization_code"
    assert form["code"] == "auth-code"
    assert challenge_for(form["code_verifier"]) == query["code_challenge"][0]

    status = client.get("/auth/status").json()
    assert status["authenticated"] is True
    assert status["tokenExpired"] is False
    assert status["expiresAt"].endswith("Z")
    assert "at-1" not in json.dumps(status)


@pytest.mark.integration
def test_callback_with_forged_state_fails(client, token_endpoint):
    client.get("/auth/login", follow_redirects=False)

    callback = client.get(
        "/auth/callback",
        params={"code": "auth-code", "state": "forged"},
        follow_redirects=False,
    )

    assert callback.headers["location"] == "/?auth_error=" + quote("Invalid state parameter", safe="")
    assert token_endpoint.forms == []
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_callback_with_provider_error(client):
    client.get("/auth/login", follow_redirects=False)

    callback = client.get(
        "/auth/callback",
        params={"error": "access_denied", "error_description": "User cancelled & left"},
        follow_redirects=False,
    )

    assert callback.headers["location"] == "/?auth_error=User%20cancelled%20%26%20left"


@pytest.mark.integration
def test_callback_with_rejected_code(client, token_endpoint):
    token_endpoint.responses["authorization_code"] = (
        400,
        {"error": "invalid_grant", "error_description": "Code expired"},
    )

    callback = login(client)

    assert callback.headers["location"] == "/?auth_error=Code%20expired"
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_chat_requires_login(client, oauth_provider):
    route = chat_route(oauth_provider, return_value=httpx.Response(200))

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 401
    assert response.json() == {
        "error": "Authentication required",
        "message": "Please login first",
        "requiresAuth": True,
    }
    assert not route.called


@pytest.mark.integration
@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}, {"message": None}])
def test_chat_requires_message(client, body):
    login(client)

    response = client.post("/api/chat", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Message is required"


@pytest.mark.integration
def test_chat_relays_event_stream(client, oauth_provider, sse_body):
    route = chat_route(
        oauth_provider,
        return_value=httpx.Response(200, content=sse_body, headers={"Content-Type": "text/event-stream"}),
    )
    login(client)

    response = client.post("/api/chat", json={"message": "hello", "conversationHistory": []})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["x-accel-buffering"] == "no"
    assert response.content == sse_body + b"\n\n"

    upstream = route.calls.last.request
    assert upstream.headers["Authorization"] == "Bearer at-1"
    sent = json.loads(upstream.content)
    assert sent["model"] == CHAT_MODEL
    assert sent["store"] is False
    assert sent["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": [{"type": "text", "text": "hello"}]},
    ]


@pytest.mark.integration
def test_chat_windows_long_history(client, oauth_provider, sse_body):
    route = chat_route(oauth_provider, return_value=httpx.Response(200, content=sse_body))
    login(client)
    history = [
        {"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"}
        for i in range(12)
    ]

    response = client.post("/api/chat", json={"message": "next", "conversationHistory": history})

    assert response.status_code == 200
    messages = json.loads(route.calls.last.request.content)["messages"]
    assert len(messages) == 10
    assert messages[1]["content"] == [{"type": "text", "text": "turn 0"}]
    assert messages[2]["content"] == "turn 1"
    assert messages[3]["content"] == [{"type": "text", "text": "turn 6"}]
    assert messages[-2]["content"] == "turn 11"


@pytest.mark.integration
def test_expired_token_is_refreshed_transparently(client, oauth_provider, token_endpoint, sse_body):
    token_endpoint.responses["authorization_code"] = (200, token_payload(expires_in=30))
    route = chat_route(oauth_provider, return_value=httpx.Response(200, content=sse_body))
    login(client)
    assert client.get("/auth/status").json()["tokenExpired"] is True

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert token_endpoint.grants() == ["authorization_code", "refresh_token"]
    assert token_endpoint.forms[1]["refresh_token"] == "rt-1"
    assert route.calls.last.request.headers["Authorization"] == "Bearer at-2"
    assert client.get("/auth/status").json()["tokenExpired"] is False


@pytest.mark.integration
def test_expired_token_without_refresh_token_requires_login(client, oauth_provider, token_endpoint):
    token_endpoint.responses["authorization_code"] = (200, token_payload(refresh_token=None, expires_in=30))
    route = chat_route(oauth_provider, return_value=httpx.Response(200))
    login(client)

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 401
    assert response.json()["requiresAuth"] is True
    assert not route.called
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_rejected_refresh_requires_login(client, oauth_provider, token_endpoint):
    token_endpoint.responses["authorization_code"] = (200, token_payload(expires_in=30))
    token_endpoint.responses["refresh_token"] = (400, {"error": "invalid_grant"})
    chat_route(oauth_provider, return_value=httpx.Response(200))
    login(client)

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 401
    assert response.json()["requiresAuth"] is True
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_upstream_401_is_retried_with_refreshed_token(client, oauth_provider, token_endpoint, sse_body):
    route = chat_route(
        oauth_provider,
        side_effect=[httpx.Response(401), httpx.Response(200, content=sse_body)],
    )
    login(client)

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert response.content == sse_body + b"\n\n"
    assert [call.request.headers["Authorization"] for call in route.calls] == ["Bearer at-1", "Bearer at-2"]
    assert token_endpoint.grants() == ["authorization_code", "refresh_token"]


@pytest.mark.integration
def test_repeated_upstream_401_expires_session(client, oauth_provider):
    route = chat_route(oauth_provider, return_value=httpx.Response(401))
    login(client)

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 401
    assert response.json() == {
        "error": "Session expired",
        "message": "Session expired. Please login again.",
        "requiresAuth": True,
    }
    assert route.call_count == 2
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_upstream_error_status_becomes_stream_error(client, oauth_provider):
    chat_route(oauth_provider, return_value=httpx.Response(500, text="internal failure"))
    login(client)

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert response.content == b'data: {"error": "API Error", "message": "internal failure"}\n\n'


@pytest.mark.integration
def test_unreachable_chat_api(client, oauth_provider):
    chat_route(oauth_provider, side_effect=httpx.ConnectError("connection refused"))
    login(client)

    response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 502
    assert "connection refused" in response.json()["message"]


@pytest.mark.integration
def test_logout_revokes_and_clears_session(client, oauth_provider):
    login(client)

    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Logged out successfully"}
    revoke = oauth_provider.routes["revoke"]
    assert read_form(revoke.calls.last.request) == {"token": "at-1"}
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_logout_succeeds_when_revocation_fails(client, oauth_provider):
    oauth_provider.routes["revoke"].mock(return_value=httpx.Response(503))
    login(client)

    response = client.post("/auth/logout")

    assert response.json()["success"] is True
    assert client.get("/auth/status").json()["authenticated"] is False


@pytest.mark.integration
def test_cors_preflight(client):
    response = client.options(
        "/api/chat",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:5173")


@pytest.mark.integration
def test_callback_with_non_ascii_state_fails_cleanly(client, token_endpoint):
    client.get("/auth/login", follow_redirects=False)

    callback = client.get(
        "/auth/callback",
        params={"code": "auth-code", "state": "é"},
        follow_redirects=False,
    )

    assert callback.status_code == 302
    assert callback.headers["location"] == "/?auth_error=" + quote("Invalid state parameter", safe="")
    assert token_endpoint.forms == []


@pytest.mark.integration
def test_chat_accepts_bare_string_content_parts(client, oauth_provider, sse_body):
    route = chat_route(oauth_provider, return_value=httpx.Response(200, content=sse_body))
    login(client)
    history = [
        {"role": "user", "content": ["hello ", {"type": "text", "text": "there"}]},
        {"role": "assistant", "content": ["hi"]},
    ]

    response = client.post("/api/chat", json={"message": "next", "conversationHistory": history})

    assert response.status_code == 200
    messages = json.loads(route.calls.last.request.content)["messages"]
    assert messages[1]["content"] == [{"type": "text", "text": "hello there"}]
    assert messages[2]["content"] == "hi"
