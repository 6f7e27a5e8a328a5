"""
调试用摘要：prompt 与 data URI 在 DEBUG 日志中统一截断，避免把整段 base64 打进日志。
"""

from __future__ import annotations

import logging
import re
from typing import Any

from imagegate.util.logger import logger

DEFAULT_EXCERPT_MAX_LEN = 200
_DATA_URI_RE = re.compile(r"^(data:[^;,]*(?:;[^,]*)?,)(.*)$", re.DOTALL)


def excerpt_for_debug(text: str, max_len: int = DEFAULT_EXCERPT_MAX_LEN) -> str:
    if not text:
        return ""
    s = str(text).strip()
    if len(s) <= max_len:
        return s
    return f"{s[:max_len]} ... [truncated, total {len(s)} chars]"


def redact_data_uri(value: str) -> str:
    """Keep the data URI header, replace the payload with its length."""
    matched = _DATA_URI_RE.match(value)
    if not matched:
        return value
    return f"{matched.group(1)}<{len(matched.group(2))} chars>"


def sanitize_payload_for_log(value: Any) -> Any:
    """Deep copy of a JSON payload with every data URI shortened."""
    if isinstance(value, dict):
        return {key: sanitize_payload_for_log(item) for key, item in value.items()}
    if isinstance(value, list):
        return [sanitize_payload_for_log(item) for item in value]
    if isinstance(value, str):
        return redact_data_uri(value)
    return value


def debug_log_prompt(label: str, prompt: str, *, max_len: int = DEFAULT_EXCERPT_MAX_LEN) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("%s prompt=%s", label, excerpt_for_debug(prompt, max_len=max_len))
