"""Schema builder for strict structured outputs.

Nodes are immutable and composed by the caller, so the tree is never
discovered or parsed, only serialized with :meth:`JSONSchema.to_dict`.
Self-referential schemas are out of scope: there is no ``$ref`` support and
no cycle detection.

Object nodes always list every property as required and forbid additional
properties, which is what strict structured-output mode demands. There is no
way to mark a property optional.

Example:
    ```python
    person = JSONSchema.object(
        {
            "name": JSONSchema.string("Full name"),
            "age": JSONSchema.integer("Age in years"),
            "tags": JSONSchema.array(JSONSchema.string("Tag"), "Free-form tags"),
        },
        description="A person",
    )
    ```
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from tessera.errors import ConfigurationError


class SchemaType(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True, eq=True)
class JSONSchema:
    """One node of a JSON Schema tree."""

    type: SchemaType | None
    description: str | None = None
    properties: Mapping[str, JSONSchema] | None = None
    items: JSONSchema | None = None
    any_of: tuple[JSONSchema, ...] | None = None
    enum_cases: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.properties is not None:
            object.__setattr__(
                self, "properties", MappingProxyType(dict(self.properties))
            )
        if self.any_of is not None:
            object.__setattr__(self, "any_of", tuple(self.any_of))
        if self.enum_cases is not None:
            object.__setattr__(self, "enum_cases", tuple(self.enum_cases))

    def __hash__(self) -> int:
        properties = (
            tuple(self.properties.items()) if self.properties is not None else None
        )
        return hash(
            (
                self.type,
                self.description,
                properties,
                self.items,
                self.any_of,
                self.enum_cases,
            )
        )

    @property
    def required(self) -> list[str]:
        """All property names of an object node; empty for other nodes."""
        if self.properties is None:
            return []
        return list(self.properties)

    @classmethod
    def object(
        cls, properties: Mapping[str, JSONSchema], description: str | None = None
    ) -> JSONSchema:
        return cls(SchemaType.OBJECT, description=description, properties=properties)

    @classmethod
    def array(cls, items: JSONSchema, description: str) -> JSONSchema:
        return cls(SchemaType.ARRAY, description=description, items=items)

    @classmethod
    def string(cls, description: str) -> JSONSchema:
        return cls(SchemaType.STRING, description=description)

    @classmethod
    def enum(cls, cases: Sequence[str], description: str | None = None) -> JSONSchema:
        """String node restricted to ``cases``."""
        if isinstance(cases, str) or not cases:
            raise ConfigurationError(
                "enum cases must be a non-empty sequence of strings",
                hint="Pass JSONSchema.enum(['low', 'high']).",
            )
        return cls(SchemaType.STRING, description=description, enum_cases=tuple(cases))

    @classmethod
    def number(cls, description: str) -> JSONSchema:
        return cls(SchemaType.NUMBER, description=description)

    @classmethod
    def integer(cls, description: str) -> JSONSchema:
        return cls(SchemaType.INTEGER, description=description)

    @classmethod
    def boolean(cls, description: str) -> JSONSchema:
        return cls(SchemaType.BOOLEAN, description=description)

    @classmethod
    def union(
        cls, variants: Sequence[JSONSchema], description: str | None = None
    ) -> JSONSchema:
        """Node matching any one of ``variants`` (``anyOf``)."""
        if not variants:
            raise ConfigurationError("union needs at least one variant")
        return cls(None, description=description, any_of=tuple(variants))

    def to_dict(self) -> dict[str, Any]:
        """Serialize into a JSON Schema mapping, omitting absent keywords."""
        out: dict[str, Any] = {}
        if self.type is not None:
            out["type"] = self.type.value
        if self.description is not None:
            out["description"] = self.description
        if self.enum_cases is not None:
            out["enum"] = list(self.enum_cases)
        if self.properties is not None:
            out["properties"] = {
                name: child.to_dict() for name, child in self.properties.items()
            }
        if self.type is SchemaType.OBJECT:
            out["required"] = self.required
            out["additionalProperties"] = False
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.any_of is not None:
            out["anyOf"] = [variant.to_dict() for variant in self.any_of]
        return out
