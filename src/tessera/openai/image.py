"""Request encoding for the image generation endpoint.

Unlike text requests, image requests carry model-specific parameters flattened
into the top-level body rather than nested under the model.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from tessera.errors import ConfigurationError


class ImageModelFamily(str, Enum):
    GPT_IMAGE_1 = "gpt-image-1"
    DALL_E_3 = "dall-e-3"
    DALL_E_2 = "dall-e-2"


class GPTImageSize(str, Enum):
    AUTO = "auto"
    SQUARE_1024 = "1024x1024"
    LANDSCAPE_1536 = "1536x1024"
    PORTRAIT_1536 = "1024x1536"


class GPTImageQuality(str, Enum):
    AUTO = "auto"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Background(str, Enum):
    AUTO = "auto"
    TRANSPARENT = "transparent"
    OPAQUE = "opaque"


class DallE3Size(str, Enum):
    SQUARE_1024 = "1024x1024"
    LANDSCAPE_1792 = "1792x1024"  # 7:4
    PORTRAIT_1792 = "1024x1792"  # 4:7


class DallE3Quality(str, Enum):
    STANDARD = "standard"
    HD = "hd"


class Style(str, Enum):
    VIVID = "vivid"
    NATURAL = "natural"


class DallE2Size(str, Enum):
    SQUARE_256 = "256x256"
    SQUARE_512 = "512x512"
    SQUARE_1024 = "1024x1024"


_DISPLAY_NAMES: dict[ImageModelFamily, str] = {
    ImageModelFamily.GPT_IMAGE_1: "GPT Image 1",
    ImageModelFamily.DALL_E_3: "DALL·E 3",
    ImageModelFamily.DALL_E_2: "DALL·E 2",
}

_MAX_IMAGES: dict[ImageModelFamily, int] = {
    ImageModelFamily.GPT_IMAGE_1: 10,
    ImageModelFamily.DALL_E_3: 1,
    ImageModelFamily.DALL_E_2: 10,
}


def _parameter(enum_type: type[Enum], value: Any) -> str:
    """Return the wire value of *value*, which must be a member of *enum_type*."""
    try:
        return enum_type(value).value
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(
            f"{value!r} is not a valid {enum_type.__name__}",
            hint=f"Choose one of: {allowed}.",
        ) from e


@dataclass(frozen=True)
class ImageModel:
    """An image model together with its model-specific parameters.

    Use the family constructors; each accepts only the parameters that family
    understands, so an invalid combination cannot be built.
    """

    family: ImageModelFamily
    size: str
    quality: str | None = None
    style: str | None = None
    background: str | None = None

    @classmethod
    def gpt_image_1(
        cls,
        size: GPTImageSize = GPTImageSize.AUTO,
        quality: GPTImageQuality = GPTImageQuality.AUTO,
        background: Background = Background.AUTO,
    ) -> ImageModel:
        return cls(
            ImageModelFamily.GPT_IMAGE_1,
            size=_parameter(GPTImageSize, size),
            quality=_parameter(GPTImageQuality, quality),
            background=_parameter(Background, background),
        )

    @classmethod
    def dall_e_3(
        cls,
        size: DallE3Size = DallE3Size.SQUARE_1024,
        quality: DallE3Quality = DallE3Quality.STANDARD,
        style: Style = Style.VIVID,
    ) -> ImageModel:
        return cls(
            ImageModelFamily.DALL_E_3,
            size=_parameter(DallE3Size, size),
            quality=_parameter(DallE3Quality, quality),
            style=_parameter(Style, style),
        )

    @classmethod
    def dall_e_2(cls, size: DallE2Size = DallE2Size.SQUARE_1024) -> ImageModel:
        return cls(ImageModelFamily.DALL_E_2, size=_parameter(DallE2Size, size))

    @property
    def wire_id(self) -> str:
        return self.family.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self.family]

    def parameters(self) -> dict[str, str]:
        """Model-specific fields to flatten into the request body."""
        params = {"size": self.size}
        for key in ("quality", "style", "background"):
            value = getattr(self, key)
            if value is not None:
                params[key] = value
        return params


@dataclass(frozen=True)
class ImageRequest:
    """Wire body of ``POST v1/images/generations``."""

    prompt: str
    model: ImageModel
    #: Number of images; ``dall-e-3`` only supports one.
    n: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            raise ConfigurationError(
                "prompt is empty or whitespace-only",
                hint="Describe the image to generate.",
            )
        if self.n is not None:
            limit = _MAX_IMAGES[self.model.family]
            if (
                isinstance(self.n, bool)
                or not isinstance(self.n, int)
                or not 1 <= self.n <= limit
            ):
                raise ConfigurationError(
                    f"n must be between 1 and {limit} for {self.model.wire_id}, got {self.n!r}",
                )

    def encode(self) -> dict[str, Any]:
        """Return the JSON-ready body with model parameters at the top level."""
        body: dict[str, Any] = {"prompt": self.prompt, "model": self.model.wire_id}
        body.update(self.model.parameters())
        if self.n is not None:
            body["n"] = self.n
        return body
