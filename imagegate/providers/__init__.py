"""Provider selection helpers."""

from __future__ import annotations

from typing import Any

from imagegate.core.models import ExtractedPayload, GenerationRequest, GenerationResult
from imagegate.core.routing import ProviderKind
from imagegate.providers.ark import ArkProvider
from imagegate.providers.base import ImageProvider
from imagegate.providers.siliconflow import SiliconFlowProvider

_PROVIDERS: dict[ProviderKind, ImageProvider] = {
    ProviderKind.ARK: ArkProvider(),
    ProviderKind.SILICONFLOW: SiliconFlowProvider(),
}


def get_provider(kind: ProviderKind) -> ImageProvider:
    return _PROVIDERS[kind]


def build_provider_request(
    kind: ProviderKind, request: GenerationRequest, payload: ExtractedPayload
) -> dict[str, Any]:
    return get_provider(kind).build_request(request, payload)


def normalize(kind: ProviderKind, raw: Any, model: str) -> GenerationResult:
    return get_provider(kind).normalize_response(raw, model)
