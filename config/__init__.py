"""Configuration management package for the DevAssist relay"""

from .loader import ConfigLoader, get_config_loader, load_system_prompt
from .schema import RelayConfig, parse_origins

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "load_system_prompt",
    "RelayConfig",
    "parse_origins",
]
