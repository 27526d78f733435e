"""Tessera: a typed async client for the OpenAI Responses and Images APIs.

Public API:
    - OpenAI: client with ``ask()`` and ``create_image()``
    - Model / ImageModel: selectable models and their parameters
    - JSONSchema / ResponseFormat: structured-output schemas
    - OpenAIError: the single error type raised by client calls
    - Config: configuration with API key resolution
"""

from __future__ import annotations

import logging

from tessera.config import Config
from tessera.errors import (
    APIError,
    ConfigurationError,
    RateLimitError,
    TesseraError,
)
from tessera.openai import (
    ErrorKind,
    ImageModel,
    ImageRequest,
    ImageResponse,
    JSONSchema,
    Model,
    OpenAI,
    OpenAIError,
    ReasoningEffort,
    Response,
    ResponseFormat,
    ServiceTier,
    TextVerbosity,
)
from tessera.rest import ResponsePlugin, RESTClient
from tessera.types import TokenUsage

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("tessera-ai")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("tessera").addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "Config",
    "ConfigurationError",
    "ErrorKind",
    "ImageModel",
    "ImageRequest",
    "ImageResponse",
    "JSONSchema",
    "Model",
    "OpenAI",
    "OpenAIError",
    "RESTClient",
    "RateLimitError",
    "ReasoningEffort",
    "Response",
    "ResponseFormat",
    "ResponsePlugin",
    "ServiceTier",
    "TesseraError",
    "TextVerbosity",
    "TokenUsage",
]
