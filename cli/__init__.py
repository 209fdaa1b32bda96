"""CLI package for the DevAssist relay

Validates configuration and runs the relay server.
"""

from cli.main import main

__all__ = [
    "main",
]
