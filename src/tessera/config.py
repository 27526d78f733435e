"""Configuration: frozen Config with API key resolution."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from tessera.errors import ConfigurationError

load_dotenv()

DEFAULT_BASE_URL = "https://api.openai.com/"

_API_KEY_ENV_VAR = "OPENAI_API_KEY"
_BASE_URL_ENV_VAR = "OPENAI_BASE_URL"


@dataclass(frozen=True)
class Config:
    """Immutable client configuration.

    API keys are auto-resolved from the standard environment variable, after
    loading a project ``.env`` file if one exists.

    Example:
        config = Config()  # key from OPENAI_API_KEY
        client = OpenAI.from_config(config)
    """

    #: Auto-resolved from ``OPENAI_API_KEY`` when *None*.
    api_key: str | None = None
    #: Auto-resolved from ``OPENAI_BASE_URL`` when *None*.
    base_url: str | None = None
    timeout_s: float = 60.0

    def __post_init__(self) -> None:
        """Auto-resolve environment values and validate."""
        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This bounds each HTTP request in seconds.",
            )

        if self.api_key is None:
            object.__setattr__(self, "api_key", os.environ.get(_API_KEY_ENV_VAR))
        if not self.api_key:
            raise ConfigurationError(
                "API key required for OpenAI",
                hint=f"Set {_API_KEY_ENV_VAR} environment variable or pass api_key=...",
            )

        if self.base_url is None:
            object.__setattr__(
                self,
                "base_url",
                os.environ.get(_BASE_URL_ENV_VAR) or DEFAULT_BASE_URL,
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(api_key={'[REDACTED]' if self.api_key else None}, "
            f"base_url={self.base_url!r}, timeout_s={self.timeout_s})"
        )

    __repr__ = __str__
