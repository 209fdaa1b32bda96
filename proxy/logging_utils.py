"""
Logging utilities for request debugging and tracing.
"""
import logging
from typing import Dict, Mapping

from conversation import WindowedContext
from headers import REDACTED_HEADERS

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 60
MESSAGE_PREVIEW_CHARS = 50


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy of headers with credentials replaced by [REDACTED]"""
    return {
        name: "[REDACTED]" if name.lower() in REDACTED_HEADERS else value
        for name, value in headers.items()
    }


def _preview(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def log_chat_request(request_id: str, context: WindowedContext, system_prompt: str, message: str):
    """Log a summary of the windowed conversation sent upstream"""
    logger.info(f"[{request_id}] CHAT REQUEST")
    logger.info(f"[{request_id}]   System prompt: {len(system_prompt)} chars")
    logger.info(f"[{request_id}]   History: {context.history_turns} msgs (from {context.source_turns} total)")
    logger.info(f"[{request_id}]   Total messages: {len(context.messages)}")
    logger.info(f"[{request_id}]   Payload size: ~{context.payload_chars() / 1024:.1f} KB")
    logger.info(f"[{request_id}]   Follow-up: {'YES' if context.is_follow_up else 'NO'}")
    logger.info(f'[{request_id}]   Current msg: "{_preview(message, PREVIEW_CHARS)}"')

    if logger.isEnabledFor(logging.DEBUG):
        for index, msg in enumerate(context.messages):
            content = msg["content"]
            text = content if isinstance(content, str) else str(content)
            logger.debug(f"[{request_id}]   [{index}] {msg['role']}: {_preview(text, MESSAGE_PREVIEW_CHARS)}")
