"""
上游凭据解析与 HTTP 转发。从 router 拆出，便于维护与单测。
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Mapping

import httpx

from imagegate.config.settings import settings
from imagegate.core.errors import MalformedResponseError, MissingCredentialError, UpstreamUnreachableError
from imagegate.providers.base import ImageProvider
from imagegate.util.logger import logger

_BEARER_PREFIX_RE = re.compile(r"^Bearer\s+", re.IGNORECASE)

_upstream_async_client: httpx.AsyncClient | None = None
_upstream_client_lock: Any = None


def _upstream_http_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=max(10, int(settings.upstream_max_connections)),
        max_keepalive_connections=max(5, int(settings.upstream_max_keepalive_connections)),
    )


def _upstream_http_timeout() -> httpx.Timeout:
    timeout = float(settings.upstream_timeout_seconds)
    return httpx.Timeout(connect=timeout, read=timeout, write=timeout, pool=timeout)


async def _get_upstream_async_client() -> httpx.AsyncClient:
    global _upstream_async_client, _upstream_client_lock
    if _upstream_async_client is not None:
        return _upstream_async_client
    if _upstream_client_lock is None:
        _upstream_client_lock = asyncio.Lock()
    async with _upstream_client_lock:
        if _upstream_async_client is None:
            _upstream_async_client = httpx.AsyncClient(
                http2=False,
                timeout=_upstream_http_timeout(),
                limits=_upstream_http_limits(),
            )
    return _upstream_async_client


async def close_upstream_async_client() -> None:
    global _upstream_async_client
    if _upstream_async_client is not None:
        await _upstream_async_client.aclose()
        _upstream_async_client = None


def _header_value(headers: Mapping[str, str], target: str) -> str:
    for key, value in headers.items():
        if key.lower() == target.lower():
            return value
    return ""


def _read_bearer_token(headers: Mapping[str, str]) -> str:
    raw = _header_value(headers, "authorization")
    if not raw:
        return ""
    return _BEARER_PREFIX_RE.sub("", raw).strip()


def _resolve_api_key(headers: Mapping[str, str], provider: ImageProvider) -> str:
    """Caller bearer token first, then the key configured for ``provider``."""
    header_key = _read_bearer_token(headers)
    if header_key:
        return header_key
    configured = (provider.configured_api_key or "").strip()
    if configured:
        logger.debug("api key resolved from settings provider=%s", provider.kind.value)
        return configured
    logger.warning("api key missing provider=%s", provider.kind.value)
    raise MissingCredentialError("缺少 API Key")


def _build_upstream_headers(api_key: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def _decode_json_body(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError("provider response is not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError("provider response is not a JSON object")
    return parsed


async def _forward_json(url: str, payload: dict[str, Any], headers: Mapping[str, str]) -> tuple[int, str]:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    logger.debug("forward_json start url=%s payload_bytes=%d", url, len(body))
    client = await _get_upstream_async_client()
    try:
        response = await client.post(url=url, content=body, headers=dict(headers))
        logger.debug("forward_json done url=%s status=%s", url, response.status_code)
        return response.status_code, response.text
    except httpx.HTTPError as exc:
        detail = (str(exc) or "").strip() or "connection_failed_or_timeout"
        logger.warning("forward_json http_error url=%s error=%s", url, detail)
        raise UpstreamUnreachableError(f"upstream_unreachable: {detail}") from exc
