"""
Request handlers for the relay.
"""
from .streaming_handler import ChatRelay, sse_error_frame

__all__ = [
    'ChatRelay',
    'sse_error_frame',
]
