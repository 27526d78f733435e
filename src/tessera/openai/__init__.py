"""OpenAI Responses and Images API binding."""

from .client import OpenAI
from .errors import ErrorKind, OpenAIError
from .image import (
    Background,
    DallE2Size,
    DallE3Quality,
    DallE3Size,
    GPTImageQuality,
    GPTImageSize,
    ImageModel,
    ImageRequest,
    Style,
)
from .models import Model, ModelFamily, ReasoningEffort, ServiceTier, TextVerbosity
from .plugins import UnicodeCleanupPlugin
from .request import Request, ResponseFormat, build_request
from .response import ImageResponse, OutputItem, Response, Usage, decode_envelope
from .schema import JSONSchema, SchemaType

__all__ = [
    "Background",
    "DallE2Size",
    "DallE3Quality",
    "DallE3Size",
    "ErrorKind",
    "GPTImageQuality",
    "GPTImageSize",
    "ImageModel",
    "ImageRequest",
    "ImageResponse",
    "JSONSchema",
    "Model",
    "ModelFamily",
    "OpenAI",
    "OpenAIError",
    "OutputItem",
    "ReasoningEffort",
    "Request",
    "Response",
    "ResponseFormat",
    "SchemaType",
    "ServiceTier",
    "Style",
    "TextVerbosity",
    "UnicodeCleanupPlugin",
    "Usage",
    "build_request",
    "decode_envelope",
]
