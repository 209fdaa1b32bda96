"""Shared pytest configuration and fixtures for DevAssist relay tests."""

from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

from config import RelayConfig
from oauth import OAuthEndpoints

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]

from tests.fixtures.mock_http import (
    AUTHORIZE_URL,
    CHAT_API_URL,
    DISCOVERY_URL,
    REVOKE_URL,
    TOKEN_URL,
)

CLIENT_ID = "test-client-id"
REDIRECT_URI = "http://localhost:3000/auth/callback"
SYSTEM_PROMPT = "You are a test assistant."
CHAT_MODEL = "Test Model"


class FakeClock:
    """Manually advanced epoch clock"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def relay_config():
    """Runtime configuration pointing at the mocked provider and chat API."""
    return RelayConfig(
        chat_api_url=CHAT_API_URL,
        client_id=CLIENT_ID,
        discovery_url=DISCOVERY_URL,
        redirect_uri=REDIRECT_URI,
        scope="restlets,rest_webservices",
        system_prompt=SYSTEM_PROMPT,
        chat_model=CHAT_MODEL,
    )


@pytest.fixture
def oauth_endpoints():
    return OAuthEndpoints(
        authorization_endpoint=AUTHORIZE_URL,
        token_endpoint=TOKEN_URL,
        revocation_endpoint=REVOKE_URL,
    )


@pytest.fixture
def client(relay_config, oauth_provider):
    """TestClient with the lifespan running; discovery goes through the mock."""
    from proxy import create_app

    with TestClient(create_app(relay_config)) as test_client:
        yield test_client


def login(test_client: TestClient, code: str = "auth-code"):
    """Walk through /auth/login and /auth/callback, returning the callback response"""
    response = test_client.get("/auth/login", follow_redirects=False)
    state = parse_qs(urlsplit(response.headers["location"]).query)["state"][0]
    return test_client.get(
        "/auth/callback",
        params={"code": code, "state": state},
        follow_redirects=False,
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, HTTP mocked)")
    config.addinivalue_line("markers", "integration: marks tests that drive the FastAPI app")
