"""
RelayServer class for CLI control of the FastAPI application.
"""
import logging
import os
from typing import Optional

import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from settings import PORT, LOG_LEVEL, BIND_ADDRESS
from .app import app

logger = logging.getLogger(__name__)

DEBUG_LOG_FILE = "relay_debug.log"
FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: int, log_file: Optional[str] = None):
    """
    Route all records through one Rich console handler.

    Args:
        level: Root log level
        log_file: Also append plain-text records to this file when given
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        root_logger.addHandler(file_handler)

    # uvicorn installs its own handlers; send its records through ours instead
    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True


class RelayServer:
    """Relay server wrapper for CLI control"""

    def __init__(self, debug: bool = False, bind_address: Optional[str] = None, port: Optional[int] = None):
        self.debug = debug
        self.bind_address = bind_address or BIND_ADDRESS
        self.port = port or PORT

        if debug:
            log_file = os.path.abspath(DEBUG_LOG_FILE)
            configure_logging(logging.DEBUG, log_file)
            logger.info(f"Debug logging enabled - appending to {log_file}")
        else:
            configure_logging(getattr(logging, str(LOG_LEVEL).upper(), logging.INFO))

    def run(self):
        """Run the relay server (blocking)"""
        logger.info(f"Starting DevAssist relay on http://{self.bind_address}:{self.port}")
        config = uvicorn.Config(
            app,
            host=self.bind_address,
            port=self.port,
            log_level="debug" if self.debug else str(LOG_LEVEL).lower(),
            log_config=None,
            access_log=False  # Request middleware already logs API calls
        )
        uvicorn.Server(config).run()
