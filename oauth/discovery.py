"""OAuth authorization server metadata discovery"""

import logging

import httpx

from errors import DiscoveryError
from .models import OAuthEndpoints

logger = logging.getLogger(__name__)


async def fetch_oauth_endpoints(
    client: httpx.AsyncClient,
    discovery_url: str,
    timeout: float = 10.0,
) -> OAuthEndpoints:
    """Fetch authorization, token and revocation endpoints from the discovery document

    Args:
        client: Shared HTTP client
        discovery_url: URL of the provider metadata document
        timeout: Request timeout in seconds

    Returns:
        Loaded endpoint URLs

    Raises:
        DiscoveryError: If the document cannot be fetched or lacks required endpoints
    """
    logger.info(f"Fetching OAuth metadata from: {discovery_url}")
    try:
        response = await client.get(discovery_url, timeout=timeout)
        response.raise_for_status()
        endpoints = OAuthEndpoints.from_metadata(response.json())
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch OAuth metadata: {e}")
        raise DiscoveryError(f"Failed to fetch OAuth metadata from {discovery_url}: {e}") from e
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Invalid OAuth metadata document: {e}")
        raise DiscoveryError(f"Invalid OAuth metadata document at {discovery_url}: {e}") from e

    logger.info("OAuth endpoints loaded:")
    logger.info(f"  Authorization: {endpoints.authorization_endpoint}")
    logger.info(f"  Token: {endpoints.token_endpoint}")
    if endpoints.revocation_endpoint:
        logger.info(f"  Revocation: {endpoints.revocation_endpoint}")
    return endpoints
