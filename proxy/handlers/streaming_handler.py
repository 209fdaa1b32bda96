"""
Streaming relay between the browser and the upstream chat API.

The relay works in two phases. open_stream() obtains a token, sends the
request and handles one re-authentication on HTTP 401; errors raised there
still become regular JSON responses. forward() then relays the event stream
byte for byte, so any failure from that point on is reported in-band as a
final SSE error frame.
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi import Request

from errors import SessionExpired, TransportError
from headers import UPSTREAM_CHAT_HEADERS
from oauth import TokenManager
from ..logging_utils import redact_headers

logger = logging.getLogger(__name__)

# Markers the upstream API puts in stream payloads when generation fails
UPSTREAM_ERROR_MARKERS = (b"unexpected_error", b"AN_UNEXPECTED_ERROR")
RESPONSE_PREVIEW_CHARS = 500


def sse_error_frame(error: str, message: str) -> bytes:
    """Encode a terminal error event in the upstream's data-only SSE framing"""
    return f"data: {json.dumps({'error': error, 'message': message})}\n\n".encode("utf-8")


class ChatRelay:
    """Sends chat requests upstream and relays the event stream"""

    def __init__(self, client: httpx.AsyncClient, token_manager: TokenManager, chat_api_url: str):
        self.client = client
        self.token_manager = token_manager
        self.chat_api_url = chat_api_url

    async def _send(self, request_id: str, body: Dict[str, Any], access_token: str) -> httpx.Response:
        token_type = self.token_manager.snapshot().token_type or "Bearer"
        headers = {**UPSTREAM_CHAT_HEADERS, "Authorization": f"{token_type} {access_token}"}
        logger.debug(f"[{request_id}] Upstream headers: {redact_headers(headers)}")

        request = self.client.build_request("POST", self.chat_api_url, json=body, headers=headers)
        try:
            return await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"[{request_id}] Failed to reach chat API: {e}")
            raise TransportError(f"Failed to reach chat API: {e}") from e

    async def open_stream(self, request_id: str, body: Dict[str, Any]) -> httpx.Response:
        """
        Send the chat request and return the open upstream response.

        Args:
            request_id: Request ID for logging
            body: Upstream request body

        Returns:
            Streaming response; the caller must pass it to forward() which closes it

        Raises:
            NotAuthenticated: No session, or the token could not be refreshed
            SessionExpired: Upstream rejected the token again after a refresh
            TransportError: The chat API could not be reached
        """
        access_token = await self.token_manager.get_valid_token()

        logger.info(f"[{request_id}] Sending request to chat API...")
        response = await self._send(request_id, body, access_token)
        if response.status_code != 401:
            return response

        await response.aclose()
        logger.warning(f"[{request_id}] Received 401, refreshing token and retrying...")
        access_token = await self.token_manager.force_refresh(access_token)

        response = await self._send(request_id, body, access_token)
        if response.status_code != 401:
            return response

        await response.aclose()
        logger.error(f"[{request_id}] Chat API rejected the refreshed token, clearing session")
        await self.token_manager.invalidate()
        raise SessionExpired("Session expired. Please login again.")

    async def forward(
        self,
        request_id: str,
        response: httpx.Response,
        http_request: Optional[Request] = None,
    ) -> AsyncIterator[bytes]:
        """
        Relay the upstream response to the client.

        Args:
            request_id: Request ID for logging
            response: Response returned by open_stream()
            http_request: Client request, polled for disconnects between chunks

        Yields:
            Raw upstream bytes, or a single SSE error frame
        """
        try:
            if not response.is_success:
                error_body = (await response.aread()).decode("utf-8", "replace")
                logger.error(f"[{request_id}] Chat API error {response.status_code}: {error_body[:RESPONSE_PREVIEW_CHARS]}")
                yield sse_error_frame("API Error", error_body or f"HTTP {response.status_code}")
                return

            preview = bytearray()
            saw_error = False
            async for chunk in response.aiter_bytes():
                if http_request is not None and await http_request.is_disconnected():
                    logger.info(f"[{request_id}] Client disconnected, closing upstream stream")
                    return

                if any(marker in chunk for marker in UPSTREAM_ERROR_MARKERS):
                    logger.error(f"[{request_id}] Chat API error in stream: {chunk[:RESPONSE_PREVIEW_CHARS]!r}")
                saw_error = saw_error or b"error" in chunk
                if len(preview) < RESPONSE_PREVIEW_CHARS:
                    preview.extend(chunk[:RESPONSE_PREVIEW_CHARS - len(preview)])

                yield chunk

            if saw_error:
                logger.info(f"[{request_id}] Chat API response (may contain error): {preview.decode('utf-8', 'replace')}")

            # Terminates a final frame the upstream left without its blank line
            yield b"\n\n"

        except httpx.HTTPError as e:
            logger.error(f"[{request_id}] Stream error: {e}")
            yield sse_error_frame("Stream error", str(e) or type(e).__name__)
        finally:
            await response.aclose()
            logger.debug(f"[{request_id}] Upstream stream closed")
