"""OpenAI client: text generation and image generation."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING

from tessera._http import JSON_CONTENT_TYPE
from tessera.config import DEFAULT_BASE_URL
from tessera.errors import APIError, ConfigurationError
from tessera.openai.errors import OpenAIError
from tessera.openai.plugins import UnicodeCleanupPlugin
from tessera.openai.request import build_request
from tessera.openai.response import (
    ERROR_CONTEXT,
    ImageResponse,
    Response,
    error_body_to_message,
)
from tessera.rest import RESTClient

if TYPE_CHECKING:
    from types import TracebackType

    import httpx

    from tessera.config import Config
    from tessera.openai.image import ImageRequest
    from tessera.openai.models import Model, ServiceTier, TextVerbosity
    from tessera.openai.request import ResponseFormat
    from tessera.rest import ResponsePlugin

log = logging.getLogger(__name__)

RESPONSES_PATH = "v1/responses"
IMAGES_PATH = "v1/images/generations"


class OpenAI:
    """Typed client for the OpenAI Responses and Images endpoints.

    Holds only immutable configuration and a shared HTTP client, so one
    instance can be awaited from many tasks at once. Each call sends exactly
    one request; there are no internal retries.

    Example:
        ```python
        async with OpenAI(api_key) as client:
            response = await client.ask(
                Model.gpt5_mini(ReasoningEffort.LOW),
                "Translate 'background colour' to French.",
                verbosity=TextVerbosity.LOW,
            )
            print(response.output_text)
        ```
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 60.0,
        response_plugins: Sequence[ResponsePlugin] = (),
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with an API key.

        ``response_plugins`` run after the built-in NUL cleanup, in order.
        ``timeout_s`` bounds each request, also on an injected ``http_client``.

        Raises:
            ConfigurationError: The key is empty or cannot be sent as a header.
        """
        if not api_key:
            raise ConfigurationError(
                "api_key required for OpenAI",
                hint="Set OPENAI_API_KEY or pass OpenAI(api_key=...).",
            )
        # Header values are encoded as ASCII by httpx.
        if not api_key.isascii() or any(ch.isspace() for ch in api_key):
            raise ConfigurationError(
                "api_key contains non-ASCII or whitespace characters",
                hint="Re-copy the key; stray quotes, spaces or look-alike "
                "characters are common when pasting.",
            )
        self._rest = RESTClient(
            base_url,
            base_headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": JSON_CONTENT_TYPE,
            },
            response_plugins=(UnicodeCleanupPlugin(), *response_plugins),
            error_body_to_message=error_body_to_message,
            base_error_context=ERROR_CONTEXT,
            timeout_s=timeout_s,
            http_client=http_client,
        )

    @classmethod
    def from_config(
        cls, config: Config, *, http_client: httpx.AsyncClient | None = None
    ) -> OpenAI:
        """Build a client from a resolved :class:`Config`."""
        return cls(
            config.api_key or "",
            base_url=config.base_url or DEFAULT_BASE_URL,
            timeout_s=config.timeout_s,
            http_client=http_client,
        )

    async def ask(
        self,
        model: Model,
        input: str,
        *,
        instructions: str | None = None,
        verbosity: TextVerbosity | None = None,
        response_format: ResponseFormat | None = None,
        previous_response_id: str | None = None,
        store: bool | None = None,
        service_tier: ServiceTier | None = None,
    ) -> Response:
        """Generate a response with the Responses API.

        Args:
            model: Model and, for reasoning models, the reasoning effort.
            input: The user prompt.
            instructions: Optional system-level instructions.
            verbosity: Optional answer length.
            response_format: Optional structured-output schema; decode the
                result with ``Response.extract_structured``.
            previous_response_id: ``Response.id`` of an earlier call to
                continue that conversation.
            store: Whether the service should persist the response.
            service_tier: Optional processing tier.

        Raises:
            OpenAIError: ``request_error`` wrapping the transport, status or
                decode failure.
        """
        request = build_request(
            model,
            input,
            instructions=instructions,
            verbosity=verbosity,
            response_format=response_format,
            previous_response_id=previous_response_id,
            store=store,
            service_tier=service_tier,
        )
        log.debug(
            "ask model=%s continuation=%s", model.display_name, previous_response_id
        )
        try:
            return await self._rest.fetch_and_decode(
                "POST", RESPONSES_PATH, Response, json_body=request.encode()
            )
        except APIError as e:
            raise OpenAIError.request_error(e) from e

    async def create_image(self, request: ImageRequest) -> ImageResponse:
        """Generate images with the Images API.

        Raises:
            OpenAIError: ``request_error`` wrapping the transport, status or
                decode failure.
        """
        log.debug("create_image model=%s", request.model.wire_id)
        try:
            return await self._rest.fetch_and_decode(
                "POST", IMAGES_PATH, ImageResponse, json_body=request.encode()
            )
        except APIError as e:
            raise OpenAIError.request_error(e) from e

    async def aclose(self) -> None:
        """Close underlying HTTP resources owned by this client."""
        await self._rest.aclose()

    async def __aenter__(self) -> OpenAI:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
