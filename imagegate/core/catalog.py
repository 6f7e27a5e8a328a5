"""Statically known model ids, grouped by owning provider."""

from __future__ import annotations

from imagegate.core.routing import detect_provider

KNOWN_MODELS: tuple[str, ...] = (
    "doubao-seedream-4-0-250828",
    "Qwen/Qwen-Image",
    "Qwen/Qwen-Image-Edit",
    "Kwai-Kolors/Kolors",
)


def list_models() -> list[dict[str, str]]:
    return [
        {"id": model_id, "object": "model", "owned_by": detect_provider(model_id).value}
        for model_id in KNOWN_MODELS
    ]
