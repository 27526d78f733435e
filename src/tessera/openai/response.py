"""Response envelopes and the second-stage structured decode.

The Responses API always returns text, even for structured outputs; the
schema only constrains what JSON that text contains. Decoding is therefore
two-staged: body bytes into :class:`Response`, then the message text into the
caller's type with :meth:`Response.extract_structured`.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    PydanticSchemaGenerationError,
    TypeAdapter,
    ValidationError,
)

from tessera.errors import APIError, ConfigurationError
from tessera.openai.errors import OpenAIError
from tessera.rest import decode_model
from tessera.types import TokenUsage

T = TypeVar("T")

ERROR_CONTEXT = "OpenAI"


class _Envelope(BaseModel):
    model_config = ConfigDict(frozen=True)


class OutputItemType(str, Enum):
    MESSAGE = "message"
    REASONING = "reasoning"


class ContentType(str, Enum):
    OUTPUT_TEXT = "output_text"


class Content(_Envelope):
    type: ContentType
    text: str


class OutputItem(_Envelope):
    """One entry of ``output``; reasoning items usually have no content."""

    id: str | None = None
    type: OutputItemType
    role: str | None = None
    content: tuple[Content, ...] | None = None


class Usage(_Envelope):
    input_tokens: int
    output_tokens: int
    total_tokens: int

    @property
    def token_usage(self) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            total_tokens=self.total_tokens,
        )


class Response(_Envelope):
    """Decoded body of a successful ``POST v1/responses`` call.

    ``id`` can be passed as ``previous_response_id`` on a later call to
    continue the conversation.

    Example:
        ```python
        model = Model.gpt5_mini(ReasoningEffort.LOW)
        response = await client.ask(model, "Hi")
        print(response.output_text)
        print(model.estimate_cost_usd(response.usage.token_usage))
        ```
    """

    id: str
    object: str
    usage: Usage
    output: tuple[OutputItem, ...]

    def _first_message_content(self) -> Content | None:
        message = next(
            (item for item in self.output if item.type is OutputItemType.MESSAGE),
            None,
        )
        if message is None or not message.content:
            return None
        return message.content[0]

    @property
    def output_text(self) -> str:
        """First message's first text fragment, or ``""``. Never raises."""
        content = self._first_message_content()
        return content.text if content is not None else ""

    def extract_text(self) -> str:
        """Return the first message's first text fragment.

        Raises:
            OpenAIError: ``empty_response`` when there is no message item or it
                has no content.
        """
        content = self._first_message_content()
        if content is None:
            raise OpenAIError.empty_response()
        return content.text

    def extract_structured(self, type_: type[T]) -> T:
        """Decode the message text, itself a JSON document, into ``type_``.

        ``type_`` may be anything pydantic can validate: a ``BaseModel``
        subclass, a dataclass, a ``TypedDict``, ``dict[str, Any]``, ...

        Raises:
            OpenAIError: ``empty_response`` as for :meth:`extract_text`, or
                ``json_schema_decoding_error`` wrapping the pydantic
                ``ValidationError`` when the text is not valid JSON for
                ``type_``.
            ConfigurationError: pydantic cannot validate ``type_`` at all.
        """
        try:
            adapter = TypeAdapter(type_)
        except PydanticSchemaGenerationError as e:
            raise ConfigurationError(
                f"Cannot decode structured output into {type_!r}",
                hint="Use a pydantic model, dataclass, TypedDict or builtin type.",
            ) from e
        text = self.extract_text()
        try:
            return adapter.validate_json(text)
        except ValidationError as e:
            raise OpenAIError.json_schema_decoding_error(e) from e


def decode_envelope(data: bytes | str) -> Response:
    """Parse sanitized body bytes into a :class:`Response`.

    Raises:
        OpenAIError: ``request_error`` wrapping the decode ``APIError``.
    """
    try:
        return decode_model(Response, data, context=ERROR_CONTEXT)
    except APIError as e:
        raise OpenAIError.request_error(e) from e


class Image(_Envelope):
    url: str | None = None
    #: Returned instead of ``url`` by ``gpt-image-1``.
    b64_json: str | None = None
    revised_prompt: str | None = None


class ImageResponse(_Envelope):
    data: tuple[Image, ...]

    @property
    def urls(self) -> list[str]:
        return [image.url for image in self.data if image.url is not None]


class ErrorDetail(_Envelope):
    message: str
    type: str | None = None
    code: str | int | None = None


class ErrorResponse(_Envelope):
    """Body of any non-2xx response: ``{"error": {"message": ...}}``."""

    error: ErrorDetail


def error_body_to_message(data: bytes) -> str:
    """Extract the human-readable message from an error body.

    Raises ``ValidationError`` when the body is not an error envelope; the
    REST client then falls back to a generic status description.
    """
    return ErrorResponse.model_validate_json(data).error.message

