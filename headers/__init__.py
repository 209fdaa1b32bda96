"""HTTP headers and constants package for the DevAssist relay"""

from .constants import (
    USER_AGENT,
    FORM_CONTENT_TYPE,
    UPSTREAM_CHAT_HEADERS,
    SSE_RESPONSE_HEADERS,
    REDACTED_HEADERS,
)

__all__ = [
    "USER_AGENT",
    "FORM_CONTENT_TYPE",
    "UPSTREAM_CHAT_HEADERS",
    "SSE_RESPONSE_HEADERS",
    "REDACTED_HEADERS",
]
