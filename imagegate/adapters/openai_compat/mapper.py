"""OpenAI chat completions <-> generation records."""

from __future__ import annotations

import uuid
from typing import Any

from imagegate.config.settings import settings
from imagegate.core.errors import ValidationError
from imagegate.core.models import GeneratedImage, GenerationRequest, GenerationResult


def to_generation_request(payload: dict[str, Any]) -> GenerationRequest:
    messages = payload.get("messages")
    if not isinstance(messages, list) or not messages:
        raise ValidationError("messages 字段不能为空")
    return GenerationRequest.model_validate(payload)


def make_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def _render_image(image: GeneratedImage) -> dict[str, Any]:
    rendered: dict[str, Any] = {"type": "image_url", "image_url": {"url": image.url}}
    if image.size:
        rendered["size"] = image.size
    return rendered


def to_chat_response(result: GenerationResult, completion_id: str | None = None) -> dict[str, Any]:
    message: dict[str, Any] = {
        "role": "assistant",
        "content": settings.completion_note,
        "images": [_render_image(image) for image in result.images],
    }
    if result.provider_metadata:
        message["metadata"] = dict(result.provider_metadata)

    output: dict[str, Any] = {
        "id": completion_id or make_completion_id(),
        "object": "chat.completion",
        "created": result.created,
        "model": result.model,
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
    }
    if result.usage is not None:
        output["usage"] = result.usage
    return output
