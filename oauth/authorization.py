"""OAuth authorization-code flow with PKCE: login redirect, callback and logout"""

import logging
import secrets
from typing import Optional, Union
from urllib.parse import urlencode, urlsplit

import httpx

from errors import (
    AuthorizationDenied,
    MissingCode,
    RelayError,
    StateMismatch,
)
from .models import LoginOutcome, OAuthEndpoints, PkceAttempt
from .pkce import PKCEManager, challenge_for
from .token_exchange import exchange_code, revoke_token
from .token_manager import TokenManager

logger = logging.getLogger(__name__)


def build_authorize_url(
    authorization_endpoint: str,
    client_id: str,
    redirect_uri: str,
    scope: str,
    attempt: PkceAttempt,
) -> str:
    """Construct the authorization URL for one login attempt

    Existing query parameters on the endpoint URL are preserved.
    """
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": scope,
        "state": attempt.state,
        "code_challenge": challenge_for(attempt.code_verifier),
        "code_challenge_method": "S256",
    }
    separator = "&" if urlsplit(authorization_endpoint).query else "?"
    return f"{authorization_endpoint}{separator}{urlencode(params)}"


def evaluate_callback(
    attempt: Optional[PkceAttempt],
    code: Optional[str],
    state: Optional[str],
    error: Optional[str] = None,
    error_description: Optional[str] = None,
) -> Union[RelayError, str]:
    """Check callback parameters against the pending attempt

    Args:
        attempt: Pending login attempt, None if there is none
        code: Authorization code query parameter
        state: State query parameter
        error: Provider error code, if the user denied access or the request failed
        error_description: Human readable provider error

    Returns:
        The verified authorization code, or the error describing why the callback is rejected
    """
    if error:
        return AuthorizationDenied(error_description or error)

    if attempt is None or state is None or not secrets.compare_digest(
        state.encode("utf-8"), attempt.state.encode("utf-8")
    ):
        return StateMismatch("Invalid state parameter")

    if not code:
        return MissingCode("No authorization code received")

    return code


class AuthorizationFlow:
    """Drives login, callback and logout against the discovered endpoints"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoints: OAuthEndpoints,
        token_manager: TokenManager,
        client_id: str,
        redirect_uri: str,
        scope: str,
        timeout: float = 30.0,
    ):
        self.client = client
        self.endpoints = endpoints
        self.token_manager = token_manager
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.timeout = timeout
        self.pkce = PKCEManager()

    def begin_login(self) -> str:
        """Start a login attempt

        Replaces any pending attempt.

        Returns:
            Authorization URL the browser must be redirected to
        """
        if self.pkce.attempt is not None:
            logger.warning("Replacing a pending login attempt; its callback will fail the state check")
        attempt = self.pkce.begin()
        logger.info("Redirecting to provider authorization...")
        return build_authorize_url(
            self.endpoints.authorization_endpoint,
            self.client_id,
            self.redirect_uri,
            self.scope,
            attempt,
        )

    async def handle_callback(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ) -> LoginOutcome:
        """Finish a login attempt

        The pending attempt is cleared whatever the outcome.

        Returns:
            Success, or a failure carrying the reason
        """
        attempt = self.pkce.take()
        verdict = evaluate_callback(attempt, code, state, error, error_description)
        if isinstance(verdict, RelayError):
            if isinstance(verdict, StateMismatch):
                logger.error("State mismatch - possible CSRF attack")
            else:
                logger.error(f"OAuth callback rejected ({verdict.kind}): {verdict.message}")
            return LoginOutcome.failure(verdict)

        try:
            tokens = await exchange_code(
                self.client,
                self.endpoints.token_endpoint,
                verdict,
                attempt.code_verifier,
                self.client_id,
                self.redirect_uri,
                timeout=self.timeout,
            )
        except RelayError as e:
            logger.error(f"Token exchange failed: {e.message}")
            return LoginOutcome.failure(e)

        await self.token_manager.store(tokens)
        logger.info("Authentication successful!")
        return LoginOutcome.success()

    async def logout(self):
        """Revoke the access token if possible and clear the session"""
        session = self.token_manager.snapshot()
        if session.access_token and self.endpoints.revocation_endpoint:
            await revoke_token(
                self.client,
                self.endpoints.revocation_endpoint,
                session.access_token,
                timeout=self.timeout,
            )
        await self.token_manager.invalidate()
        logger.info("Logged out successfully")
