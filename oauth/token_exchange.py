"""OAuth token endpoint calls: code exchange and revocation"""

import logging

import httpx

from errors import TransportError, UpstreamError
from headers import FORM_CONTENT_TYPE
from .models import TokenResponse

logger = logging.getLogger(__name__)


def describe_token_error(response: httpx.Response) -> str:
    """Extract the most useful error text from a token endpoint response

    Prefers error_description, then error, then the raw body.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        message = data.get("error_description") or data.get("error")
        if message:
            return str(message)

    return response.text or f"HTTP {response.status_code}"


async def post_token_request(
    client: httpx.AsyncClient,
    token_url: str,
    form: dict,
    timeout: float,
) -> TokenResponse:
    """POST a form to the token endpoint and parse the token response

    Raises:
        UpstreamError: Non-2xx response or a body without an access token
        TransportError: The token endpoint could not be reached
    """
    try:
        response = await client.post(
            token_url,
            data=form,
            headers={"Content-Type": FORM_CONTENT_TYPE},
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        raise TransportError(f"Token endpoint unreachable: {e}") from e

    if not response.is_success:
        raise UpstreamError(describe_token_error(response), upstream_status=response.status_code)

    try:
        return TokenResponse.from_dict(response.json())
    except (ValueError, KeyError, TypeError) as e:
        raise UpstreamError(f"Invalid token response: {e}", upstream_status=response.status_code) from e


async def exchange_code(
    client: httpx.AsyncClient,
    token_url: str,
    code: str,
    code_verifier: str,
    client_id: str,
    redirect_uri: str,
    timeout: float = 30.0,
) -> TokenResponse:
    """Exchange an authorization code for tokens

    Args:
        client: Shared HTTP client
        token_url: Token endpoint from discovery
        code: Authorization code from the callback
        code_verifier: PKCE verifier of the pending attempt
        client_id: OAuth client ID
        redirect_uri: Redirect URI used in the authorization request

    Returns:
        Parsed token response

    Raises:
        UpstreamError: If the provider rejects the exchange
        TransportError: If the token endpoint cannot be reached
    """
    logger.info("Exchanging authorization code for tokens...")
    tokens = await post_token_request(
        client,
        token_url,
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": client_id,
            "code_verifier": code_verifier,
        },
        timeout,
    )
    logger.info(f"Access token expires in: {tokens.expires_in} seconds")
    logger.info(f"Refresh token received: {tokens.refresh_token is not None}")
    return tokens


async def revoke_token(
    client: httpx.AsyncClient,
    revocation_url: str,
    token: str,
    timeout: float = 30.0,
) -> bool:
    """Best-effort token revocation

    Returns:
        True if the provider accepted the revocation, False otherwise
    """
    try:
        response = await client.post(
            revocation_url,
            data={"token": token},
            headers={"Content-Type": FORM_CONTENT_TYPE},
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        logger.warning(f"Token revocation failed: {e}")
        return False

    if not response.is_success:
        logger.warning(f"Token revocation failed: HTTP {response.status_code} - {describe_token_error(response)}")
        return False

    logger.info("Token revoked upstream")
    return True
