"""Volcengine Ark (Seedream) image generation."""

from __future__ import annotations

from typing import Any

from imagegate.config.settings import settings
from imagegate.core.models import ExtractedPayload, GenerationRequest, GenerationResult
from imagegate.core.routing import ProviderKind, clamp
from imagegate.providers.base import ImageProvider, created_timestamp, decode_image_entries, locate_image_list

DEFAULT_SIZE = "1024x1024"
RANDOM_SEED = -1
MAX_SEQUENTIAL_IMAGES = 4


class ArkProvider(ImageProvider):
    kind = ProviderKind.ARK

    @property
    def endpoint(self) -> str:
        return settings.ark_api_url

    @property
    def configured_api_key(self) -> str:
        return settings.ark_api_key

    @property
    def default_model(self) -> str:
        return settings.ark_default_model

    def build_request(self, request: GenerationRequest, payload: ExtractedPayload) -> dict[str, Any]:
        # n=0 与未传一致，走单图模式
        max_images = int(clamp(request.n, 1, MAX_SEQUENTIAL_IMAGES)) if request.n else None
        body: dict[str, Any] = {
            "model": self.resolve_model(request),
            "prompt": payload.prompt,
            # Ark 只接受 http(s) 参考图，data URI 不转发
            "image": list(payload.remote_images),
            "sequential_image_generation": "auto" if max_images else "disabled",
            "response_format": "b64_json",
            "size": request.size or DEFAULT_SIZE,
            "seed": request.seed if request.seed is not None else RANDOM_SEED,
            "stream": False,
            "watermark": False,
        }
        if max_images:
            body["sequential_image_generation_options"] = {"max_images": max_images}
        return body

    def normalize_response(self, raw: Any, model: str) -> GenerationResult:
        entries = locate_image_list(raw, "data")
        images = decode_image_entries(entries)
        return GenerationResult(
            images=images,
            created=created_timestamp(raw),
            model=model,
            usage=raw.get("usage"),
        )
