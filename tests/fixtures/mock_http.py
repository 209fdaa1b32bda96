"""RESPX-based HTTP mocking fixtures for the OAuth provider and chat API.

The provider mock serves the discovery document, a token endpoint that
answers by grant type, and a revocation endpoint. Tests register the chat
API route themselves on the yielded router.
"""

from urllib.parse import parse_qsl

import httpx
import pytest
import respx

DISCOVERY_URL = "https://auth.example.test/.well-known/oauth-authorization-server"
AUTHORIZE_URL = "https://auth.example.test/oauth2/authorize"
TOKEN_URL = "https://auth.example.test/oauth2/token"
REVOKE_URL = "https://auth.example.test/oauth2/revoke"
CHAT_API_URL = "https://chat.example.test/api/chat"


def token_payload(access_token="at-1", refresh_token="rt-1", expires_in=3600):
    """Token endpoint response body; None values are left out"""
    payload = {"access_token": access_token, "token_type": "Bearer"}
    if refresh_token is not None:
        payload["refresh_token"] = refresh_token
    if expires_in is not None:
        payload["expires_in"] = expires_in
    return payload


def read_form(request: httpx.Request) -> dict:
    return dict(parse_qsl(request.content.decode("utf-8")))


class TokenEndpoint:
    """Fake token endpoint answering per grant type

    Each entry of ``responses`` is a (status, json body) pair. The forms of
    all requests are recorded in ``forms``.
    """

    def __init__(self):
        self.forms = []
        self.responses = {
            "authorization_code": (200, token_payload()),
            "refresh_token": (200, token_payload("at-2", "rt-2")),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        form = read_form(request)
        self.forms.append(form)
        status, body = self.responses[form["grant_type"]]
        return httpx.Response(status, json=body)

    def grants(self):
        return [form["grant_type"] for form in self.forms]


@pytest.fixture
def discovery_document():
    """OAuth authorization server metadata."""
    return {
        "issuer": "https://auth.example.test",
        "authorization_endpoint": AUTHORIZE_URL,
        "token_endpoint": TOKEN_URL,
        "revocation_endpoint": REVOKE_URL,
        "code_challenge_methods_supported": ["S256"],
    }


@pytest.fixture
def token_endpoint():
    return TokenEndpoint()


@pytest.fixture
def oauth_provider(discovery_document, token_endpoint):
    """Active respx router mocking the OAuth provider."""
    with respx.mock(assert_all_called=False) as router:
        router.get(DISCOVERY_URL, name="discovery").mock(
            return_value=httpx.Response(200, json=discovery_document)
        )
        router.post(TOKEN_URL, name="token").mock(side_effect=token_endpoint)
        router.post(REVOKE_URL, name="revoke").mock(return_value=httpx.Response(200))
        yield router


@pytest.fixture
def sse_body():
    """Upstream event stream in data-only SSE framing."""
    return (
        b'data: {"choices":[{"delta":{"content":"Hello"}}]}\n\n'
        b'data: {"choices":[{"delta":{"content":" there"}}]}\n\n'
        b"data: [DONE]\n\n"
    )
