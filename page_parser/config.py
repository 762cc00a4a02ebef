"""
Settings for the page parser, read from environment variables.

A .env file in the working directory is loaded first (python-dotenv), so
values can live there instead of the shell environment:

    PAGE_PARSER_BASE_URL=http://example.com
    PAGE_PARSER_BACKEND=html.parser
    PAGE_PARSER_TEXT_POLICY=overwrite
    PAGE_PARSER_SANITIZE=false
    PAGE_PARSER_TIMEOUT=10
    PAGE_PARSER_USER_AGENT=page-parser/0.1
    PAGE_PARSER_LOG_LEVEL=INFO
    PAGE_PARSER_LOG_FILE=parser.log
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from .builder import BACKENDS, TextPolicy
from .exceptions import ConfigError

ENV_PREFIX = "PAGE_PARSER_"

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; page-parser/0.1)"


class Settings(BaseModel):
    """Runtime configuration."""
    base_url: str = "http://thejoeshow.net"
    backend: str = "html.parser"                   # Preferred BeautifulSoup tree builder
    text_policy: TextPolicy = TextPolicy.OVERWRITE
    sanitize: bool = False                         # Run the Sanitizer before building
    timeout: float = 10.0                          # HTTP timeout in seconds
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("backend")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        if value not in BACKENDS:
            raise ValueError(f"backend must be one of {', '.join(BACKENDS)}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(env_file: Optional[str] = None, **overrides) -> Settings:
    """
    Build Settings from the environment, then apply keyword overrides.

    Args:
        env_file: Path to a .env file (default: search from the working directory)
        **overrides: Field values that win over the environment (None is ignored)

    Raises:
        ConfigError: a value fails validation
    """
    load_dotenv(env_file)

    values = {}
    for name in Settings.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        # Empty strings count as unset so `PAGE_PARSER_LOG_FILE=` works
        if raw:
            values[name] = raw

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e.error_count()} error(s)",
            details={"errors": [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]}
        )
