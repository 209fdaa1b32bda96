"""Conversation history handling for upstream chat requests"""

from .context_window import (
    ASSISTANT_TRUNCATE_THRESHOLD,
    MAX_HISTORY_CHARS,
    TRUNCATION_MARKER,
    Turn,
    WindowedContext,
    build_context,
    extract_text,
    normalize_history,
    select_window,
    serialized_size,
    trim_to_budget,
    truncate_long_reply,
)
from .request_builder import build_chat_request

__all__ = [
    "ASSISTANT_TRUNCATE_THRESHOLD",
    "MAX_HISTORY_CHARS",
    "TRUNCATION_MARKER",
    "Turn",
    "WindowedContext",
    "build_context",
    "extract_text",
    "normalize_history",
    "select_window",
    "serialized_size",
    "trim_to_budget",
    "truncate_long_reply",
    "build_chat_request",
]
