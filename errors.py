"""Error variants shared by the OAuth flow, the token manager and the chat relay

Every failure the relay can report is one of the classes below. HTTP status
codes are attached here but only applied at the FastAPI boundary.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for all relay errors"""

    kind = "relay_error"
    title = "Server Error"
    status_code = 500
    requires_auth = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Body used for JSON responses and SSE error frames"""
        body: Dict[str, Any] = {"error": self.title, "message": self.message}
        if self.requires_auth:
            body["requiresAuth"] = True
        return body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


class NotAuthenticated(RelayError):
    """No usable session; the client has to log in again"""

    kind = "not_authenticated"
    title = "Authentication required"
    status_code = 401
    requires_auth = True


class RefreshFailed(NotAuthenticated):
    """The refresh token was rejected, missing or could not be used"""

    kind = "refresh_failed"


class SessionExpired(NotAuthenticated):
    """Upstream rejected the access token twice in a row"""

    kind = "session_expired"
    title = "Session expired"


class StateMismatch(RelayError):
    """Callback state does not match the pending login attempt"""

    kind = "state_mismatch"
    title = "Login failed"
    status_code = 400


class MissingCode(RelayError):
    kind = "missing_code"
    title = "Login failed"
    status_code = 400


class AuthorizationDenied(RelayError):
    """The provider redirected back with an error parameter"""

    kind = "authorization_denied"
    title = "Login failed"
    status_code = 400


class InvalidRequest(RelayError):
    kind = "invalid_request"
    title = "Message is required"
    status_code = 400


class UpstreamError(RelayError):
    """Non-2xx response from the token or chat endpoint"""

    kind = "upstream_error"
    title = "API Error"
    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class TransportError(RelayError):
    """Network failure talking to an upstream endpoint"""

    kind = "transport_error"
    title = "Upstream unreachable"
    status_code = 502


class DiscoveryError(RelayError):
    """OAuth metadata could not be loaded at startup"""

    kind = "discovery_error"
    title = "OAuth discovery failed"
    status_code = 500


__all__ = [
    "RelayError",
    "NotAuthenticated",
    "RefreshFailed",
    "SessionExpired",
    "StateMismatch",
    "MissingCode",
    "AuthorizationDenied",
    "InvalidRequest",
    "UpstreamError",
    "TransportError",
    "DiscoveryError",
]
