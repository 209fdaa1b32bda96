"""Runtime configuration object injected into the application"""

from dataclasses import dataclass, field
from typing import List, Optional

from .loader import load_system_prompt


def parse_origins(value) -> List[str]:
    """Split a comma separated CORS origin list; empty means any origin"""
    origins = [o.strip() for o in str(value or "").split(",") if o.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class RelayConfig:
    """Everything the relay needs at runtime

    Attributes:
        chat_api_url: Upstream streaming chat-completion endpoint
        client_id: OAuth client identifier (public client, no secret)
        discovery_url: OAuth authorization server metadata document
        redirect_uri: Callback URL registered with the provider
        scope: Space or comma separated OAuth scopes
        system_prompt: Prompt prepended to every chat request
        chat_model: Model name sent in the upstream request body
        max_history_chars: Ceiling for the serialized conversation history
    """
    chat_api_url: str
    client_id: str
    discovery_url: str
    redirect_uri: str = "http://localhost:3000/auth/callback"
    scope: str = "restlets,rest_webservices"
    system_prompt: str = ""
    chat_model: str = "F3 NS Dev Assist"
    max_history_chars: int = 50000
    connect_timeout: float = 10.0
    read_timeout: float = 120.0
    token_timeout: float = 30.0
    discovery_timeout: float = 10.0
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_settings(cls, system_prompt: Optional[str] = None) -> "RelayConfig":
        """Build the config from the module-level settings

        Args:
            system_prompt: Prompt override; loaded from PROMPT_FILE_PATH when None
        """
        import settings

        if system_prompt is None:
            system_prompt = load_system_prompt(settings.PROMPT_FILE_PATH, settings.DEFAULT_SYSTEM_PROMPT)

        return cls(
            chat_api_url=settings.CHAT_API_URL,
            client_id=settings.OAUTH_CLIENT_ID,
            discovery_url=settings.OAUTH_DISCOVERY_URL,
            redirect_uri=settings.OAUTH_REDIRECT_URI,
            scope=settings.OAUTH_SCOPE,
            system_prompt=system_prompt,
            chat_model=settings.CHAT_MODEL,
            max_history_chars=settings.MAX_HISTORY_CHARS,
            connect_timeout=settings.CONNECT_TIMEOUT,
            read_timeout=settings.READ_TIMEOUT,
            token_timeout=settings.TOKEN_TIMEOUT,
            discovery_timeout=settings.DISCOVERY_TIMEOUT,
            cors_allow_origins=parse_origins(settings.CORS_ALLOW_ORIGINS),
        )
