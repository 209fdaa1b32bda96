"""PKCE (Proof Key for Code Exchange) generation and the pending login attempt"""

import base64
import hashlib
import secrets
from typing import Optional

from .models import PkceAttempt

# 32 bytes -> 43 character base64url verifier (RFC 7636 allows 43-128)
VERIFIER_BYTES = 32
STATE_BYTES = 16


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode('utf-8').rstrip('=')


def new_verifier() -> str:
    """Generate a high-entropy code verifier

    Returns:
        base64url encoded random string without padding
    """
    # secrets reads the OS CSPRNG and raises if it is unavailable
    return _b64url(secrets.token_bytes(VERIFIER_BYTES))


def challenge_for(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier

    Args:
        verifier: Code verifier from new_verifier()

    Returns:
        base64url(SHA-256(verifier)) without padding
    """
    return _b64url(hashlib.sha256(verifier.encode('utf-8')).digest())


def new_state() -> str:
    """Generate an independent random state value for CSRF protection"""
    return secrets.token_hex(STATE_BYTES)


def new_attempt() -> PkceAttempt:
    """Create a fresh verifier/state pair for one login attempt"""
    return PkceAttempt(code_verifier=new_verifier(), state=new_state())


class PKCEManager:
    """Holds the single pending login attempt

    Starting a new attempt replaces the previous one, so the callback of an
    older browser tab fails its state check.
    """

    def __init__(self):
        self.attempt: Optional[PkceAttempt] = None

    def begin(self) -> PkceAttempt:
        self.attempt = new_attempt()
        return self.attempt

    def take(self) -> Optional[PkceAttempt]:
        """Return the pending attempt and clear it"""
        attempt, self.attempt = self.attempt, None
        return attempt

    def clear(self):
        self.attempt = None
