"""Provider-neutral value types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenUsage:
    """Token counts consumed by one call."""

    input_tokens: int
    output_tokens: int
    total_tokens: int
