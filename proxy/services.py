"""
Per-application service container.

Holds the objects that share the single OAuth session. It is created during
application startup and reached from endpoints through app.state, so
nothing session-related lives in module globals.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

from config import RelayConfig
from oauth import AuthorizationFlow, OAuthEndpoints, TokenManager, fetch_oauth_endpoints
from .handlers import ChatRelay

logger = logging.getLogger(__name__)


@dataclass
class RelayServices:
    """Shared HTTP client, token manager, login flow and chat relay"""
    config: RelayConfig
    client: httpx.AsyncClient
    endpoints: OAuthEndpoints
    token_manager: TokenManager
    auth_flow: AuthorizationFlow
    relay: ChatRelay

    @classmethod
    async def start(
        cls,
        config: RelayConfig,
        client: Optional[httpx.AsyncClient] = None,
        endpoints: Optional[OAuthEndpoints] = None,
    ) -> "RelayServices":
        """
        Create the services, running OAuth discovery unless endpoints are given.

        Raises:
            DiscoveryError: If discovery fails; the application must not start
        """
        owns_client = client is None
        if owns_client:
            client = httpx.AsyncClient(
                timeout=httpx.Timeout(config.read_timeout, connect=config.connect_timeout)
            )

        try:
            if endpoints is None:
                endpoints = await fetch_oauth_endpoints(client, config.discovery_url, config.discovery_timeout)
        except Exception:
            if owns_client:
                await client.aclose()
            raise

        token_manager = TokenManager(
            client,
            endpoints.token_endpoint,
            config.client_id,
            timeout=config.token_timeout,
        )
        auth_flow = AuthorizationFlow(
            client,
            endpoints,
            token_manager,
            client_id=config.client_id,
            redirect_uri=config.redirect_uri,
            scope=config.scope,
            timeout=config.token_timeout,
        )
        relay = ChatRelay(client, token_manager, config.chat_api_url)
        return cls(config, client, endpoints, token_manager, auth_flow, relay)

    async def aclose(self):
        await self.client.aclose()


def get_services(request: Request) -> RelayServices:
    """FastAPI dependency returning the application's services"""
    return request.app.state.services
