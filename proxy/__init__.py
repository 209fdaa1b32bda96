"""
DevAssist relay - FastAPI server package.

This package exposes the browser-facing OAuth and chat endpoints and relays
chat turns to the upstream streaming API with server-held credentials.
"""
from .app import app, create_app
from .server import RelayServer

__version__ = "1.0.0"

__all__ = [
    'RelayServer',
    'app',
    'create_app',
]
