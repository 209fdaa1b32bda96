"""OAuth token refresh functionality"""

import logging

import httpx

from .models import TokenResponse
from .token_exchange import post_token_request

logger = logging.getLogger(__name__)


async def refresh_tokens(
    client: httpx.AsyncClient,
    token_url: str,
    refresh_token: str,
    client_id: str,
    timeout: float = 30.0,
) -> TokenResponse:
    """Exchange a refresh token for a new token pair

    Args:
        client: Shared HTTP client
        token_url: Token endpoint from discovery
        refresh_token: Current refresh token
        client_id: OAuth client ID

    Returns:
        Parsed token response; refresh_token is None when the provider did not rotate it

    Raises:
        UpstreamError: If the provider rejects the refresh token
        TransportError: If the token endpoint cannot be reached
    """
    logger.info("Refreshing access token...")
    tokens = await post_token_request(
        client,
        token_url,
        {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": client_id,
        },
        timeout,
    )
    logger.info(f"Access token refreshed, expires in: {tokens.expires_in} seconds")
    return tokens
