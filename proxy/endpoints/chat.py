"""
Chat endpoint: windows the conversation and relays the upstream event stream.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from conversation import build_chat_request, build_context
from errors import InvalidRequest, NotAuthenticated
from headers import SSE_RESPONSE_HEADERS
from ..logging_utils import log_chat_request
from ..models import ChatRequest
from ..services import RelayServices, get_services

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/chat")
async def chat(
    body: ChatRequest,
    http_request: Request,
    services: RelayServices = Depends(get_services),
):
    """
    Relay one chat turn.

    Failures before the upstream stream is open are returned as JSON errors
    with a matching HTTP status; later failures arrive as a final SSE frame.
    """
    request_id = str(uuid.uuid4())[:8]

    if not services.token_manager.is_authenticated():
        raise NotAuthenticated("Please login first")

    if not body.message or not body.message.strip():
        raise InvalidRequest("Message is required")

    config = services.config
    context = build_context(
        body.conversationHistory,
        body.message,
        config.system_prompt,
        max_history_chars=config.max_history_chars,
    )
    log_chat_request(request_id, context, config.system_prompt, body.message)

    upstream = await services.relay.open_stream(request_id, build_chat_request(context, config.chat_model))

    return StreamingResponse(
        services.relay.forward(request_id, upstream, http_request),
        media_type="text/event-stream",
        headers=SSE_RESPONSE_HEADERS,
    )
