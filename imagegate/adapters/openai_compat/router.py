"""OpenAI-compatible routes."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from imagegate.adapters.openai_compat.mapper import make_completion_id, to_chat_response, to_generation_request
from imagegate.adapters.openai_compat.upstream import (
    _build_upstream_headers,
    _decode_json_body,
    _forward_json,
    _resolve_api_key,
)
from imagegate.config.settings import settings
from imagegate.core.catalog import list_models
from imagegate.core.errors import MalformedResponseError, UpstreamError, UpstreamUnreachableError, ValidationError
from imagegate.core.interpreter import extract_payload
from imagegate.core.models import GenerationResult
from imagegate.core.routing import detect_provider
from imagegate.observability.logging import log_event
from imagegate.providers import build_provider_request, get_provider, normalize
from imagegate.providers.base import ImageProvider
from imagegate.util.debug_excerpt import debug_log_prompt, sanitize_payload_for_log
from imagegate.util.logger import logger


router = APIRouter()


def _log_request_if_debug(request: Request, payload: dict[str, Any], route: str) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    body_size = len(str(payload))
    if settings.log_full_request_body:
        logger.debug(
            "incoming request method=%s route=%s body=%s",
            request.method,
            route,
            sanitize_payload_for_log(payload),
        )
        return
    logger.debug(
        "incoming request method=%s route=%s model=%s body_size=%d",
        request.method,
        route,
        payload.get("model"),
        body_size,
    )


def _error_response(status_code: int, reason: str, detail: str) -> JSONResponse:
    detail_str = (detail or "").strip() or reason
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": detail_str, "type": reason, "code": reason}},
    )


def _upstream_error_response(exc: UpstreamError) -> JSONResponse:
    # 上游状态码与原始错误正文原样返回
    return JSONResponse(status_code=exc.status_code, content={"error": exc.body})


async def _call_provider(provider: ImageProvider, provider_request: dict[str, Any], api_key: str) -> dict[str, Any]:
    status_code, text = await _forward_json(provider.endpoint, provider_request, _build_upstream_headers(api_key))
    if not 200 <= status_code < 300:
        raise UpstreamError(status_code=status_code, body=text)
    return _decode_json_body(text)


async def _execute_generation_once(
    *,
    payload: dict[str, Any],
    request_headers: Mapping[str, str],
    completion_id: str,
) -> GenerationResult:
    gen_request = to_generation_request(payload)
    extracted = extract_payload(gen_request.messages)
    kind = detect_provider(gen_request.model)
    provider = get_provider(kind)
    api_key = _resolve_api_key(request_headers, provider)

    model = provider.resolve_model(gen_request)
    provider_request = build_provider_request(kind, gen_request, extracted)
    debug_log_prompt("generation_request", extracted.prompt)
    logger.info(
        "generation start id=%s provider=%s model=%s embedded_images=%d remote_images=%d",
        completion_id,
        provider.kind.value,
        model,
        len(extracted.embedded_images),
        len(extracted.remote_images),
    )

    raw = await _call_provider(provider, provider_request, api_key)
    return normalize(kind, raw, model)


@router.post("/chat/completions")
async def chat_completions(payload: dict, request: Request):
    _log_request_if_debug(request, payload, "/v1/chat/completions")
    completion_id = make_completion_id()
    started = time.monotonic()
    try:
        result = await _execute_generation_once(
            payload=payload,
            request_headers=dict(request.headers),
            completion_id=completion_id,
        )
    except ValidationError as exc:
        logger.info("generation rejected id=%s reason=%s detail=%s", completion_id, exc.reason, exc)
        return _error_response(exc.status_code, exc.reason, str(exc))
    except UpstreamError as exc:
        logger.warning(
            "upstream http error id=%s status=%s body=%s",
            completion_id,
            exc.status_code,
            exc.body[:600],
        )
        return _upstream_error_response(exc)
    except UpstreamUnreachableError as exc:
        logger.error("upstream unreachable id=%s error=%s", completion_id, exc)
        return _error_response(502, "upstream_unreachable", str(exc))
    except MalformedResponseError as exc:
        logger.error("malformed upstream response id=%s error=%s", completion_id, exc)
        return _error_response(502, "malformed_upstream_response", str(exc))

    log_event(
        "generation_completed",
        request_id=completion_id,
        provider=detect_provider(result.model).value,
        model=result.model,
        images=len(result.images),
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    return JSONResponse(content=to_chat_response(result, completion_id))


@router.get("/models")
async def models() -> dict:
    return {"object": "list", "data": list_models()}
