"""OAuth token lifecycle management

The manager owns the single in-memory TokenSession. Writers (store,
invalidate, refresh) are serialized by one asyncio.Lock; readers take the
current immutable snapshot without locking.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from errors import NotAuthenticated, RefreshFailed, RelayError
from .models import TokenResponse, TokenSession
from .token_refresh import refresh_tokens

logger = logging.getLogger(__name__)


class TokenManager:
    """Tracks the current token pair and refreshes it on demand

    Concurrent callers that find the token stale share one refresh: the first
    caller performs it while holding the lock, the others wait and then see
    the replaced token instead of refreshing again.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_url: str,
        client_id: str,
        timeout: float = 30.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            client: Shared HTTP client for token endpoint calls
            token_url: Token endpoint from discovery
            client_id: OAuth client ID
            timeout: Token endpoint timeout in seconds
            clock: Returns the current time as epoch seconds
        """
        self.client = client
        self.token_url = token_url
        self.client_id = client_id
        self.timeout = timeout
        self._clock = clock
        self._session = TokenSession()
        self._lock = asyncio.Lock()

    # Reads

    def snapshot(self) -> TokenSession:
        return self._session

    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    def is_token_expired(self) -> bool:
        """True when the token is missing, past expiry or inside the expiry buffer"""
        return self._session.is_stale(self._clock())

    def status(self) -> Dict[str, Any]:
        """Session status without exposing secrets"""
        session = self._session
        return {
            "authenticated": session.is_authenticated,
            "tokenExpired": session.is_stale(self._clock()),
            "expiresAt": session.expires_at_iso(),
        }

    # Writes

    async def store(self, tokens: TokenResponse):
        """Store a freshly issued token pair"""
        async with self._lock:
            self._store_locked(tokens)

    async def invalidate(self):
        """Forget the session entirely"""
        async with self._lock:
            self._session = TokenSession()
        logger.info("Token session cleared")

    def _store_locked(self, tokens: TokenResponse, previous_refresh_token: Optional[str] = None):
        expires_at = None
        if tokens.expires_in is not None:
            expires_at = self._clock() + tokens.expires_in
        self._session = TokenSession(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token or previous_refresh_token,
            expires_at=expires_at,
            token_type=tokens.token_type,
        )

    # Token retrieval

    async def get_valid_token(self) -> str:
        """Return an access token that is not inside the expiry buffer

        Raises:
            NotAuthenticated: No session exists
            RefreshFailed: The token was stale and could not be refreshed
        """
        session = self._session
        if not session.is_authenticated:
            raise NotAuthenticated("Not authenticated. Please login first.")

        if not session.is_stale(self._clock()):
            return session.access_token

        logger.info("Access token expired or expiring soon, refreshing...")
        return await self._refresh(session.access_token, force=False)

    async def force_refresh(self, rejected_token: str) -> str:
        """Refresh after the upstream API rejected a token

        If another request already replaced the rejected token, the
        replacement is returned without another refresh call.
        """
        return await self._refresh(rejected_token, force=True)

    async def _refresh(self, stale_token: str, force: bool) -> str:
        async with self._lock:
            current = self._session
            if not current.is_authenticated:
                # Cleared while we waited: a concurrent refresh failed or the user logged out
                raise NotAuthenticated("Not authenticated. Please login first.")

            replaced = current.access_token != stale_token
            if (replaced or not force) and not current.is_stale(self._clock()):
                return current.access_token

            if not current.refresh_token:
                self._session = TokenSession()
                logger.warning("Token refresh impossible: no refresh token available")
                raise RefreshFailed("No refresh token available. Please login again.")

            try:
                tokens = await refresh_tokens(
                    self.client,
                    self.token_url,
                    current.refresh_token,
                    self.client_id,
                    timeout=self.timeout,
                )
            except RelayError as e:
                self._session = TokenSession()
                logger.error(f"Token refresh failed: {e.message}")
                raise RefreshFailed(f"Token refresh failed: {e.message}. Please login again.") from e

            self._store_locked(tokens, previous_refresh_token=current.refresh_token)
            return self._session.access_token
