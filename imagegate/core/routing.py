"""Provider selection and numeric clamping."""

from __future__ import annotations

from enum import Enum


class ProviderKind(str, Enum):
    ARK = "ark"
    SILICONFLOW = "siliconflow"


_SILICONFLOW_PREFIXES = ("Qwen/", "Kwai-Kolors/")
_SILICONFLOW_MARKER = "siliconflow"


def detect_provider(model: str | None) -> ProviderKind:
    if not model:
        return ProviderKind.ARK
    if model.startswith(_SILICONFLOW_PREFIXES) or _SILICONFLOW_MARKER in model:
        return ProviderKind.SILICONFLOW
    return ProviderKind.ARK


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
