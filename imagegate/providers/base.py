"""Image provider contract."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

from imagegate.core.errors import MalformedResponseError
from imagegate.core.models import ExtractedPayload, GeneratedImage, GenerationRequest, GenerationResult
from imagegate.core.routing import ProviderKind
from imagegate.util.logger import get_logger

DATA_URI_PNG_PREFIX = "data:image/png;base64,"

provider_logger = get_logger("providers")


def decode_image_entry(entry: Any) -> GeneratedImage | None:
    """Remote ``url`` wins over ``b64_json``; anything else is dropped."""
    if not isinstance(entry, dict):
        return None
    size = entry.get("size") if isinstance(entry.get("size"), str) else None
    url = entry.get("url")
    if isinstance(url, str):
        return GeneratedImage(url=url, size=size)
    b64 = entry.get("b64_json")
    if isinstance(b64, str):
        return GeneratedImage(url=f"{DATA_URI_PNG_PREFIX}{b64}", size=size)
    return None


def decode_image_entries(entries: list[Any]) -> list[GeneratedImage]:
    images = [image for image in (decode_image_entry(entry) for entry in entries) if image is not None]
    if len(images) < len(entries):
        provider_logger.debug("dropped undecodable image entries count=%d", len(entries) - len(images))
    return images


def created_timestamp(raw: dict[str, Any]) -> int:
    created = raw.get("created")
    if isinstance(created, (int, float)) and not isinstance(created, bool):
        return int(created)
    return int(time.time())


def locate_image_list(raw: Any, key: str) -> list[Any]:
    items = raw.get(key) if isinstance(raw, dict) else None
    if not isinstance(items, list):
        raise MalformedResponseError(f"provider response has no '{key}' image list")
    return items


class ImageProvider(ABC):
    kind: ProviderKind

    @property
    @abstractmethod
    def endpoint(self) -> str: ...

    @property
    @abstractmethod
    def configured_api_key(self) -> str: ...

    @property
    @abstractmethod
    def default_model(self) -> str: ...

    def resolve_model(self, request: GenerationRequest) -> str:
        return request.model or self.default_model

    @abstractmethod
    def build_request(self, request: GenerationRequest, payload: ExtractedPayload) -> dict[str, Any]:
        """Return the provider-native JSON body."""

    @abstractmethod
    def normalize_response(self, raw: Any, model: str) -> GenerationResult:
        """Convert the provider JSON into a ``GenerationResult``."""
