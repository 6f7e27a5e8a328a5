"""Request-scoped data records shared by interpreter, providers and mapper."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _number_or_none(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class GenerationRequest(BaseModel):
    """Caller-facing fields of a chat-completions request.

    Recognized fields with the wrong JSON type are treated as absent;
    unrecognized fields are kept in ``model_extra`` and ignored.
    """

    model_config = ConfigDict(extra="allow")

    model: str | None = None
    messages: list[Any] = Field(default_factory=list)
    n: int | float | None = None
    size: str | None = None
    image_size: str | None = None
    seed: int | float | None = None
    negative_prompt: str | None = None
    num_inference_steps: int | float | None = None
    guidance_scale: int | float | None = None
    cfg: int | float | None = None
    stream: bool = False

    @field_validator("n", "seed", "num_inference_steps", "guidance_scale", "cfg", mode="before")
    @classmethod
    def _numeric_only(cls, value: Any) -> int | float | None:
        return _number_or_none(value)

    @field_validator("model", "size", "image_size", "negative_prompt", mode="before")
    @classmethod
    def _string_only(cls, value: Any) -> str | None:
        return _string_or_none(value)

    @field_validator("messages", mode="before")
    @classmethod
    def _list_only(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []

    @field_validator("stream", mode="before")
    @classmethod
    def _bool_only(cls, value: Any) -> bool:
        return value is True


@dataclass(frozen=True, slots=True)
class TextChunk:
    text: str


@dataclass(frozen=True, slots=True)
class ImageChunk:
    url: str

    @property
    def embedded(self) -> bool:
        return self.url.startswith("data:")


@dataclass(frozen=True, slots=True)
class ExtractedPayload:
    prompt: str
    embedded_images: tuple[str, ...] = ()
    remote_images: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class GeneratedImage:
    url: str
    size: str | None = None


@dataclass(slots=True)
class GenerationResult:
    images: list[GeneratedImage]
    created: int
    model: str
    usage: Any = None
    provider_metadata: dict[str, Any] = field(default_factory=dict)
