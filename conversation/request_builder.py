"""
Upstream chat request body construction.
"""
from typing import Any, Dict

from .context_window import WindowedContext


def build_chat_request(context: WindowedContext, model: str) -> Dict[str, Any]:
    """
    Build the upstream chat-completion request body.

    The upstream API always streams, so no stream flag is sent.
    store:false asks the provider not to retain the conversation.

    Args:
        context: Windowed messages for this request
        model: Model name expected by the upstream API

    Returns:
        JSON-serializable request body
    """
    return {
        "model": model,
        "messages": context.to_payload(),
        "store": False,
    }
