"""Chat history -> generation prompt and reference images."""

from __future__ import annotations

from typing import Any, Iterable

from imagegate.core.errors import PromptNotFoundError
from imagegate.core.models import ExtractedPayload, ImageChunk, TextChunk
from imagegate.util.logger import logger


def decode_chunk(raw: Any) -> TextChunk | ImageChunk | None:
    """Decode one multimodal content part; ``None`` means skip it."""
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    if kind == "text":
        text = raw.get("text")
        return TextChunk(text=text) if isinstance(text, str) else None
    if kind == "image_url":
        image_url = raw.get("image_url")
        if isinstance(image_url, dict) and isinstance(image_url.get("url"), str):
            return ImageChunk(url=image_url["url"])
    return None


def _iter_user_messages_backward(messages: Iterable[Any]) -> Iterable[Any]:
    for message in reversed(list(messages)):
        if isinstance(message, dict) and message.get("role") == "user":
            yield message.get("content")


def extract_payload(messages: list[Any]) -> ExtractedPayload:
    """Pick the prompt from the latest user turn that carries text.

    Image references met along the way are kept, split into data URIs and
    remote links in their original order.
    """
    prompt = ""
    embedded: list[str] = []
    remote: list[str] = []

    for content in _iter_user_messages_backward(messages):
        if isinstance(content, str):
            prompt = content.strip()
        elif isinstance(content, list):
            for raw_chunk in content:
                chunk = decode_chunk(raw_chunk)
                if isinstance(chunk, TextChunk):
                    prompt = chunk.text.strip()
                elif isinstance(chunk, ImageChunk):
                    (embedded if chunk.embedded else remote).append(chunk.url)
        if prompt:
            break

    if not prompt:
        raise PromptNotFoundError("无法从用户消息中解析出 prompt 文本")

    logger.debug(
        "payload extracted prompt_chars=%d embedded_images=%d remote_images=%d",
        len(prompt),
        len(embedded),
        len(remote),
    )
    return ExtractedPayload(prompt=prompt, embedded_images=tuple(embedded), remote_images=tuple(remote))
