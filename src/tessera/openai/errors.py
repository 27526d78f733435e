"""Closed error taxonomy for the OpenAI client.

Every public client operation raises only :class:`OpenAIError`. The variant
is carried by ``kind``; two kinds wrap a nested cause. Messages are rendered
from :mod:`tessera.messages` whenever they are read, so they follow the
active language rather than the one in effect when the error was raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from tessera import messages
from tessera.errors import APIError, TesseraError


class ErrorKind(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    CONTENT_FILTER_APPLIED = "content_filter_applied"
    MAX_LENGTH_EXCEEDED = "max_length_exceeded"
    UNEXPECTED_MESSAGE_ROLE = "unexpected_message_role"
    JSON_SCHEMA_DECODING_ERROR = "json_schema_decoding_error"
    REQUEST_ERROR = "request_error"


# Default English templates; ``{cause}`` is filled for the wrapping kinds.
_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.EMPTY_RESPONSE: "OpenAI returned an empty response",
    ErrorKind.CONTENT_FILTER_APPLIED: "Content was filtered by OpenAI's safety system",
    ErrorKind.MAX_LENGTH_EXCEEDED: "Response exceeded maximum length limit",
    ErrorKind.UNEXPECTED_MESSAGE_ROLE: "Received unexpected message role in response",
    ErrorKind.JSON_SCHEMA_DECODING_ERROR: "Failed to decode structured response: {cause}",
    ErrorKind.REQUEST_ERROR: "Network request failed: {cause}",
}

_WRAPPING_KINDS = frozenset(
    {ErrorKind.JSON_SCHEMA_DECODING_ERROR, ErrorKind.REQUEST_ERROR}
)


class OpenAIError(TesseraError):
    """A failed OpenAI call, tagged with its :class:`ErrorKind`."""

    def __init__(
        self,
        kind: ErrorKind,
        cause: BaseException | None = None,
        *,
        hint: str | None = None,
    ) -> None:
        if kind in _WRAPPING_KINDS and cause is None:
            raise ValueError(f"{kind.value} requires a cause")
        super().__init__(kind.value, hint=hint)
        self.kind = kind
        self.cause = cause

    @classmethod
    def empty_response(cls) -> OpenAIError:
        return cls(ErrorKind.EMPTY_RESPONSE)

    @classmethod
    def content_filter_applied(cls) -> OpenAIError:
        return cls(ErrorKind.CONTENT_FILTER_APPLIED)

    @classmethod
    def max_length_exceeded(cls) -> OpenAIError:
        return cls(ErrorKind.MAX_LENGTH_EXCEEDED)

    @classmethod
    def unexpected_message_role(cls) -> OpenAIError:
        return cls(ErrorKind.UNEXPECTED_MESSAGE_ROLE)

    @classmethod
    def json_schema_decoding_error(cls, cause: BaseException) -> OpenAIError:
        return cls(ErrorKind.JSON_SCHEMA_DECODING_ERROR, cause)

    @classmethod
    def request_error(cls, cause: APIError) -> OpenAIError:
        """Wrap a transport failure, carrying over its hint."""
        return cls(ErrorKind.REQUEST_ERROR, cause, hint=cause.hint)

    @property
    def status_code(self) -> int | None:
        """HTTP status of a wrapped transport failure, if any."""
        if isinstance(self.cause, APIError):
            return self.cause.status_code
        return None

    @property
    def user_friendly_message(self) -> str:
        """Render the message for this kind in the active language."""
        cause = ""
        if self.cause is not None:
            cause = str(self.cause) or type(self.cause).__name__
        return messages.localized(
            f"openai.error.{self.kind.value}",
            _DEFAULT_MESSAGES[self.kind],
            cause=cause,
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Rebuild from constructor arguments; ``args`` only holds the kind value.
        return (type(self), (self.kind, self.cause), {"hint": self.hint})

    def __str__(self) -> str:
        return self.user_friendly_message

    def __repr__(self) -> str:
        return f"OpenAIError(kind={self.kind.value!r}, cause={self.cause!r})"
