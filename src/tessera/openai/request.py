"""Request encoding for the Responses endpoint."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from tessera.errors import ConfigurationError
from tessera.openai.models import ReasoningEffort, ServiceTier, TextVerbosity

if TYPE_CHECKING:
    from tessera.openai.models import Model
    from tessera.openai.schema import JSONSchema

_FORMAT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass(frozen=True)
class ResponseFormat:
    """Structured-output descriptor sent as ``text.format``."""

    name: str
    schema: JSONSchema
    description: str | None = None
    strict: bool = True

    def __post_init__(self) -> None:
        if not _FORMAT_NAME_RE.match(self.name):
            raise ConfigurationError(
                f"Invalid response format name: {self.name!r}",
                hint="Use 1-64 letters, digits, underscores or dashes.",
            )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "json_schema", "name": self.name}
        if self.description is not None:
            out["description"] = self.description
        out["strict"] = self.strict
        out["schema"] = self.schema.to_dict()
        return out


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ReasoningParam(_WireModel):
    effort: ReasoningEffort


class TextParam(_WireModel):
    verbosity: TextVerbosity | None = None
    format: dict[str, Any] | None = None


class Request(_WireModel):
    """Wire body of ``POST v1/responses``.

    Absent optionals are omitted from :meth:`encode`, never sent as ``null``;
    ``Request.model_validate(request.encode())`` reproduces the request.
    """

    model: str
    input: str
    instructions: str | None = None
    reasoning: ReasoningParam | None = None
    text: TextParam | None = None
    previous_response_id: str | None = None
    store: bool | None = None
    service_tier: ServiceTier | None = None

    def encode(self) -> dict[str, Any]:
        """Return the JSON-ready body."""
        return self.model_dump(mode="json", exclude_none=True)


def build_request(
    model: Model,
    input: str,
    *,
    instructions: str | None = None,
    verbosity: TextVerbosity | None = None,
    response_format: ResponseFormat | None = None,
    previous_response_id: str | None = None,
    store: bool | None = None,
    service_tier: ServiceTier | None = None,
) -> Request:
    """Map high-level ``ask`` arguments onto the wire request.

    The reasoning block follows the model: only variants carrying an effort
    send one. The text block is sent when a verbosity or a response format is
    given, each key independently optional.
    """
    if not isinstance(input, str):
        raise ConfigurationError(
            f"input must be a string, got {type(input).__name__}",
            hint="Pass the prompt text as input='...'.",
        )

    reasoning = (
        ReasoningParam(effort=model.reasoning) if model.reasoning is not None else None
    )

    text: TextParam | None = None
    if verbosity is not None or response_format is not None:
        text = TextParam(
            verbosity=verbosity,
            format=response_format.to_dict() if response_format is not None else None,
        )

    return Request(
        model=model.wire_id,
        input=input,
        instructions=instructions,
        reasoning=reasoning,
        text=text,
        previous_response_id=previous_response_id,
        store=store,
        service_tier=service_tier,
    )

