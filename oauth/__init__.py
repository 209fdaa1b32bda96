"""OAuth authentication package: PKCE login flow and token lifecycle"""

from .models import (
    EXPIRY_BUFFER_SECONDS,
    LoginOutcome,
    OAuthEndpoints,
    PkceAttempt,
    TokenResponse,
    TokenSession,
)
from .pkce import PKCEManager, challenge_for, new_attempt, new_state, new_verifier
from .discovery import fetch_oauth_endpoints
from .token_exchange import exchange_code, revoke_token
from .token_refresh import refresh_tokens
from .token_manager import TokenManager
from .authorization import AuthorizationFlow, build_authorize_url, evaluate_callback

__all__ = [
    # Models
    "EXPIRY_BUFFER_SECONDS",
    "LoginOutcome",
    "OAuthEndpoints",
    "PkceAttempt",
    "TokenResponse",
    "TokenSession",
    # PKCE
    "PKCEManager",
    "challenge_for",
    "new_attempt",
    "new_state",
    "new_verifier",
    # Endpoint calls
    "fetch_oauth_endpoints",
    "exchange_code",
    "revoke_token",
    "refresh_tokens",
    # Lifecycle
    "TokenManager",
    "AuthorizationFlow",
    "build_authorize_url",
    "evaluate_callback",
]
