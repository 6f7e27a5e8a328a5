"""SiliconFlow image generation (Qwen-Image, Kolors)."""

from __future__ import annotations

from typing import Any

from imagegate.config.settings import settings
from imagegate.core.models import ExtractedPayload, GenerationRequest, GenerationResult
from imagegate.core.routing import ProviderKind, clamp
from imagegate.providers.base import ImageProvider, created_timestamp, decode_image_entries, locate_image_list

KOLORS_PREFIX = "Kwai-Kolors/"
KOLORS_DEFAULT_SIZE = "1024x1024"
QWEN_DEFAULT_SIZE = "1328x1328"

MAX_BATCH_SIZE = 4
MAX_SEED = 9_999_999_999

# field -> (low, high)
_CLAMPED_FIELDS: dict[str, tuple[float, float]] = {
    "seed": (0, MAX_SEED),
    "num_inference_steps": (1, 100),
    "guidance_scale": (0, 20),
    "cfg": (0.1, 20),
}

_METADATA_KEYS = ("timings", "seed")


def default_image_size(model: str) -> str:
    return KOLORS_DEFAULT_SIZE if model.startswith(KOLORS_PREFIX) else QWEN_DEFAULT_SIZE


class SiliconFlowProvider(ImageProvider):
    kind = ProviderKind.SILICONFLOW

    @property
    def endpoint(self) -> str:
        return settings.siliconflow_api_url

    @property
    def configured_api_key(self) -> str:
        return settings.siliconflow_api_key

    @property
    def default_model(self) -> str:
        return settings.siliconflow_default_model

    def build_request(self, request: GenerationRequest, payload: ExtractedPayload) -> dict[str, Any]:
        model = self.resolve_model(request)
        batch_size = request.n if request.n is not None else 1
        body: dict[str, Any] = {
            "model": model,
            "prompt": payload.prompt,
            "batch_size": int(clamp(batch_size, 1, MAX_BATCH_SIZE)),
            "image_size": request.size or request.image_size or default_image_size(model),
        }
        if request.negative_prompt:
            body["negative_prompt"] = request.negative_prompt
        for name, (low, high) in _CLAMPED_FIELDS.items():
            value = getattr(request, name)
            if value is not None:
                body[name] = clamp(value, low, high)
        # 仅支持单张内联参考图；远程 URL 丢弃
        if payload.embedded_images:
            body["image"] = payload.embedded_images[0]
        return body

    def normalize_response(self, raw: Any, model: str) -> GenerationResult:
        entries = locate_image_list(raw, "images")
        images = decode_image_entries(entries)
        metadata = {key: raw[key] for key in _METADATA_KEYS if raw.get(key) is not None}
        return GenerationResult(
            images=images,
            created=created_timestamp(raw),
            model=model,
            usage=raw.get("usage"),
            provider_metadata=metadata,
        )
