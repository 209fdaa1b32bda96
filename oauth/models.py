"""Data models for the OAuth session"""

import datetime
from dataclasses import dataclass
from typing import Any, Dict, Optional

from errors import RelayError

# A token is treated as stale this many seconds before it actually expires
EXPIRY_BUFFER_SECONDS = 60


@dataclass(frozen=True)
class TokenSession:
    """Snapshot of the current OAuth session

    Instances are immutable; the token manager swaps the whole snapshot so
    readers never observe a half-updated session.

    Attributes:
        access_token: Bearer token for the chat API
        refresh_token: Token used to obtain a new access token
        expires_at: Absolute expiry as epoch seconds, None if unknown
        token_type: Authorization scheme, usually "Bearer"
    """
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[float] = None
    token_type: str = "Bearer"

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def is_stale(self, now: float, buffer: float = EXPIRY_BUFFER_SECONDS) -> bool:
        """Check whether the token is expired or about to expire

        An unknown expiry counts as expired so that it is refreshed before use.
        """
        if self.expires_at is None:
            return True
        return now >= self.expires_at - buffer

    def expires_at_iso(self) -> Optional[str]:
        if self.expires_at is None:
            return None
        expires = datetime.datetime.fromtimestamp(self.expires_at, tz=datetime.timezone.utc)
        return expires.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class PkceAttempt:
    """Verifier and state of one pending login

    Attributes:
        code_verifier: PKCE secret, only sent in the token exchange body
        state: CSRF binding echoed back by the provider on callback
    """
    code_verifier: str
    state: str


@dataclass(frozen=True)
class OAuthEndpoints:
    """Endpoint URLs read from the provider's discovery document"""
    authorization_endpoint: str
    token_endpoint: str
    revocation_endpoint: Optional[str] = None

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any]) -> "OAuthEndpoints":
        return cls(
            authorization_endpoint=metadata["authorization_endpoint"],
            token_endpoint=metadata["token_endpoint"],
            revocation_endpoint=metadata.get("revocation_endpoint"),
        )


@dataclass(frozen=True)
class TokenResponse:
    """Parsed body of a successful token endpoint response"""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "Bearer"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenResponse":
        expires_in = data.get("expires_in")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=int(expires_in) if expires_in is not None else None,
            token_type=data.get("token_type") or "Bearer",
        )


@dataclass(frozen=True)
class LoginOutcome:
    """Result of handling an OAuth callback

    Attributes:
        error: None on success, otherwise the failure variant
    """
    error: Optional[RelayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return "Authentication successful" if self.error is None else self.error.message

    @classmethod
    def success(cls) -> "LoginOutcome":
        return cls()

    @classmethod
    def failure(cls, error: RelayError) -> "LoginOutcome":
        return cls(error=error)
