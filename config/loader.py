"""Configuration loader for the DevAssist relay

Values are resolved in this order:
1. Process environment
2. .env file (loaded into the environment without overriding it)
3. Defaults declared in settings.py

The type of each default decides how the raw string is parsed.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})

# Heading some prompt files start with; it is documentation, not prompt text
PROMPT_HEADING_PATTERN = re.compile(r"^# SYSTEM PROMPT\s*\n")


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in TRUE_VALUES


PARSERS: Dict[type, Callable[[str], Any]] = {
    bool: _parse_bool,
    int: int,
    float: float,
}


class ConfigLoader:
    """Reads relay settings from the environment and an optional .env file"""

    def __init__(self, env_path: Optional[str] = None):
        """
        Args:
            env_path: Path to the .env file; defaults to .env in the working directory
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self.env_loaded = False
        if self.env_path.is_file():
            self.env_loaded = load_dotenv(dotenv_path=self.env_path, override=False)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f"No .env file at {self.env_path}; using process environment and defaults")

    def get(self, env_var: str, default: Any) -> Any:
        """Return the parsed value of env_var, or default when unset or unparseable

        Args:
            env_var: Environment variable name
            default: Fallback value; its type selects the parser

        Returns:
            Parsed value of the same type as default, or the raw string
        """
        raw = os.getenv(env_var)
        if raw is None:
            return default

        # bool before int: bool is a subclass of int
        parser = next((PARSERS[kind] for kind in PARSERS if isinstance(default, kind)), None)
        if parser is None:
            return raw

        try:
            return parser(raw)
        except ValueError:
            logger.warning(f"Invalid value {env_var}={raw!r}, using default: {default}")
            return default


_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get or create the process-wide ConfigLoader"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_system_prompt(prompt_path: str, default_prompt: str) -> str:
    """Load the system prompt sent as the first message of every chat request

    Args:
        prompt_path: Path to a markdown/text prompt file
        default_prompt: Prompt used when the file cannot be read

    Returns:
        Prompt text with a leading "# SYSTEM PROMPT" heading removed
    """
    path = Path(prompt_path).expanduser()
    try:
        prompt = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not load prompt file {path}, using default: {e}")
        return default_prompt

    prompt = PROMPT_HEADING_PATTERN.sub("", prompt, count=1)
    logger.info(f"Loaded system prompt from: {path}")
    return prompt
