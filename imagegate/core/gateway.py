"""FastAPI app entry."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from imagegate.adapters.openai_compat.router import _error_response, router as openai_router
from imagegate.adapters.openai_compat.upstream import close_upstream_async_client
from imagegate.config.settings import settings
from imagegate.util.logger import logger

app = FastAPI(title=settings.app_name)
app.include_router(openai_router, prefix="/v1")

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def _boundary_response(status_code: int, reason: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": detail or reason, "type": reason}},
    )


def _cors_origins() -> list[str]:
    origins = [item.strip() for item in settings.cors_allow_origins.split(",") if item.strip()]
    return origins or ["*"]


@app.middleware("http")
async def request_boundary_middleware(request: Request, call_next):
    if request.url.path == "/health":
        return await call_next(request)

    limit = settings.max_request_body_bytes
    if limit > 0 and request.method.upper() in _BODY_METHODS:
        content_length_header = request.headers.get("content-length", "").strip()
        if content_length_header:
            try:
                content_length = int(content_length_header)
            except ValueError:
                await request.body()
                logger.warning("boundary reject invalid content-length path=%s", request.url.path)
                return _boundary_response(400, "invalid_content_length", "invalid content-length header")
        else:
            content_length = len(await request.body())
        if content_length > limit:
            await request.body()
            logger.warning(
                "boundary reject oversize request size=%s max=%s path=%s",
                content_length,
                limit,
                request.url.path,
            )
            return _boundary_response(413, "request_body_too_large", "request body too large")

    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("gateway unhandled exception path=%s", request.url.path)
        return _boundary_response(500, "server_error", str(exc) or "Unknown error")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 非 JSON 对象的请求体与缺失 messages 同样按 400 处理
    errors = exc.errors()
    first = errors[0] if errors else {}
    detail = str(first.get("msg") or "request body must be a JSON object")
    logger.info("request rejected path=%s detail=%s", request.url.path, detail)
    return _error_response(400, "invalid_request", f"请求体必须是包含 messages 的 JSON 对象: {detail}")


@app.get("/health")
def health() -> dict:
    logger.info("health check")
    return {"status": "ok"}


@app.on_event("shutdown")
async def shutdown_cleanup() -> None:
    await close_upstream_async_client()


# CORS 最后注册，位于最外层以便预检请求直接应答
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
