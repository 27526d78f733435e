"""Text models and request-level enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from tessera.errors import ConfigurationError

if TYPE_CHECKING:
    from tessera.types import TokenUsage

_ONE_MILLION = Decimal(1_000_000)


class ReasoningEffort(str, Enum):
    """How much internal computation a reasoning model spends before answering."""

    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TextVerbosity(str, Enum):
    """Requested answer length."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ServiceTier(str, Enum):
    """Processing tier; ``flex`` trades latency for cost, ``priority`` the reverse."""

    AUTO = "auto"
    DEFAULT = "default"
    FLEX = "flex"
    PRIORITY = "priority"


class ModelFamily(str, Enum):
    """Tag of a :class:`Model` value; the value is the wire identifier."""

    GPT41 = "gpt-4.1"
    GPT41_MINI = "gpt-4.1-mini"
    O3 = "o3"
    O4_MINI = "o4-mini"
    GPT5 = "gpt-5"
    GPT5_MINI = "gpt-5-mini"
    GPT5_NANO = "gpt-5-nano"


@dataclass(frozen=True)
class ModelSpec:
    """Constant attributes shared by every value of one family."""

    context_window_tokens: int
    max_output_tokens: int
    input_usd_per_million_tokens: Decimal
    output_usd_per_million_tokens: Decimal
    reasoning: bool = False


# Pure data - no complex classes
MODEL_SPECS: dict[ModelFamily, ModelSpec] = {
    ModelFamily.GPT41: ModelSpec(
        context_window_tokens=1_047_576,
        max_output_tokens=32_768,
        input_usd_per_million_tokens=Decimal("2.00"),
        output_usd_per_million_tokens=Decimal("8.00"),
    ),
    ModelFamily.GPT41_MINI: ModelSpec(
        context_window_tokens=1_047_576,
        max_output_tokens=32_768,
        input_usd_per_million_tokens=Decimal("0.40"),
        output_usd_per_million_tokens=Decimal("1.60"),
    ),
    ModelFamily.O3: ModelSpec(
        context_window_tokens=200_000,
        max_output_tokens=100_000,
        input_usd_per_million_tokens=Decimal("2.00"),
        output_usd_per_million_tokens=Decimal("8.00"),
    ),
    ModelFamily.O4_MINI: ModelSpec(
        context_window_tokens=200_000,
        max_output_tokens=100_000,
        input_usd_per_million_tokens=Decimal("1.10"),
        output_usd_per_million_tokens=Decimal("4.40"),
    ),
    ModelFamily.GPT5: ModelSpec(
        context_window_tokens=400_000,
        max_output_tokens=128_000,
        input_usd_per_million_tokens=Decimal("1.25"),
        output_usd_per_million_tokens=Decimal("10.00"),
        reasoning=True,
    ),
    ModelFamily.GPT5_MINI: ModelSpec(
        context_window_tokens=400_000,
        max_output_tokens=128_000,
        input_usd_per_million_tokens=Decimal("0.25"),
        output_usd_per_million_tokens=Decimal("2.00"),
        reasoning=True,
    ),
    ModelFamily.GPT5_NANO: ModelSpec(
        context_window_tokens=400_000,
        max_output_tokens=128_000,
        input_usd_per_million_tokens=Decimal("0.05"),
        output_usd_per_million_tokens=Decimal("0.40"),
        reasoning=True,
    ),
}


@dataclass(frozen=True)
class Model:
    """A selectable text model, optionally carrying a reasoning effort.

    Build values with the family constructors:

        Model.gpt41_mini()
        Model.gpt5_mini(ReasoningEffort.MEDIUM)
    """

    family: ModelFamily
    reasoning: ReasoningEffort | None = None

    def __post_init__(self) -> None:
        """Enforce that only reasoning families carry an effort."""
        if MODEL_SPECS[self.family].reasoning:
            if self.reasoning is None:
                raise ConfigurationError(
                    f"{self.family.value} requires a reasoning effort",
                    hint="Pass one of ReasoningEffort.MINIMAL/LOW/MEDIUM/HIGH.",
                )
            try:
                effort = ReasoningEffort(self.reasoning)
            except ValueError as e:
                raise ConfigurationError(
                    f"{self.reasoning!r} is not a valid reasoning effort",
                    hint="Pass one of ReasoningEffort.MINIMAL/LOW/MEDIUM/HIGH.",
                ) from e
            object.__setattr__(self, "reasoning", effort)
        elif self.reasoning is not None:
            raise ConfigurationError(
                f"{self.family.value} does not accept a reasoning effort",
                hint="Only the GPT-5 family supports reasoning effort.",
            )

    @classmethod
    def gpt41(cls) -> Model:
        return cls(ModelFamily.GPT41)

    @classmethod
    def gpt41_mini(cls) -> Model:
        return cls(ModelFamily.GPT41_MINI)

    @classmethod
    def o3(cls) -> Model:
        return cls(ModelFamily.O3)

    @classmethod
    def o4_mini(cls) -> Model:
        return cls(ModelFamily.O4_MINI)

    @classmethod
    def gpt5(cls, reasoning: ReasoningEffort) -> Model:
        return cls(ModelFamily.GPT5, reasoning)

    @classmethod
    def gpt5_mini(cls, reasoning: ReasoningEffort) -> Model:
        return cls(ModelFamily.GPT5_MINI, reasoning)

    @classmethod
    def gpt5_nano(cls, reasoning: ReasoningEffort) -> Model:
        return cls(ModelFamily.GPT5_NANO, reasoning)

    @property
    def spec(self) -> ModelSpec:
        return MODEL_SPECS[self.family]

    @property
    def wire_id(self) -> str:
        """Identifier sent as the request's ``model`` field."""
        return self.family.value

    @property
    def context_window_tokens(self) -> int:
        return self.spec.context_window_tokens

    @property
    def max_output_tokens(self) -> int:
        return self.spec.max_output_tokens

    @property
    def input_usd_per_million_tokens(self) -> Decimal:
        return self.spec.input_usd_per_million_tokens

    @property
    def output_usd_per_million_tokens(self) -> Decimal:
        return self.spec.output_usd_per_million_tokens

    @property
    def display_name(self) -> str:
        """Wire id, with the reasoning effort appended when present."""
        if self.reasoning is None:
            return self.wire_id
        return f"{self.wire_id} ({self.reasoning.value})"

    def estimate_cost_usd(self, usage: TokenUsage) -> Decimal:
        """Return the list-price cost of *usage* on this model."""
        spec = self.spec
        return (
            Decimal(usage.input_tokens) * spec.input_usd_per_million_tokens
            + Decimal(usage.output_tokens) * spec.output_usd_per_million_tokens
        ) / _ONE_MILLION
