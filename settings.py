from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Server configuration
PORT = config.get("PORT", 3000)
LOG_LEVEL = config.get("LOG_LEVEL", "info")
BIND_ADDRESS = config.get("BIND_ADDRESS", "0.0.0.0")
# Comma separated list, "*" allows any origin
CORS_ALLOW_ORIGINS = config.get("CORS_ALLOW_ORIGINS", "*")

# Upstream chat API (required)
CHAT_API_URL = config.get("CHAT_API_URL", None)
CHAT_MODEL = config.get("CHAT_MODEL", "F3 NS Dev Assist")

# OAuth 2.0 client configuration
# Endpoint URLs are not configured here: they are read from the discovery document at startup
OAUTH_CLIENT_ID = config.get("OAUTH_CLIENT_ID", None)
OAUTH_DISCOVERY_URL = config.get("OAUTH_DISCOVERY_URL", None)
OAUTH_REDIRECT_URI = config.get("OAUTH_REDIRECT_URI", "http://localhost:3000/auth/callback")
OAUTH_SCOPE = config.get("OAUTH_SCOPE", "restlets,rest_webservices")

REQUIRED_SETTINGS = ("CHAT_API_URL", "OAUTH_CLIENT_ID", "OAUTH_DISCOVERY_URL")

# System prompt
PROMPT_FILE_PATH = config.get("PROMPT_FILE_PATH", "system-prompt.md")
DEFAULT_SYSTEM_PROMPT = config.get(
    "DEFAULT_SYSTEM_PROMPT",
    "You are NetSuite Dev Assist, a highly skilled software engineer with extensive knowledge "
    "in NetSuite, SuiteScript, SuiteQL, and modern web development.",
)

# Conversation windowing: ceiling for the serialized history sent upstream (~50KB)
MAX_HISTORY_CHARS = config.get("MAX_HISTORY_CHARS", 50000)

# Timeout configuration
# Connection timeout: time to establish the TCP connection
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Read timeout: time between received chunks, detects stalled streams
READ_TIMEOUT = config.get("READ_TIMEOUT", 120.0)
# Token endpoint calls (exchange, refresh, revoke)
TOKEN_TIMEOUT = config.get("TOKEN_TIMEOUT", 30.0)
# Discovery document fetch at startup
DISCOVERY_TIMEOUT = config.get("DISCOVERY_TIMEOUT", 10.0)


def missing_required_settings() -> list[str]:
    """Names of required settings that are not configured"""
    return [name for name in REQUIRED_SETTINGS if not globals().get(name)]
