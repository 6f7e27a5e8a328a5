"""Project error hierarchy."""

from __future__ import annotations


class ImageGateError(Exception):
    """Base error."""


class ValidationError(ImageGateError):
    """Raised when a request is rejected before any upstream call."""

    status_code = 400
    reason = "invalid_request"


class PromptNotFoundError(ValidationError):
    """Raised when no user message yields a prompt text."""

    reason = "prompt_not_found"


class MissingCredentialError(ValidationError):
    """Raised when neither the caller nor the config provides an API key."""

    status_code = 401
    reason = "missing_api_key"


class UpstreamError(ImageGateError):
    """Non-success provider response, kept verbatim."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"upstream_http_error:{status_code}")
        self.status_code = status_code
        self.body = body


class UpstreamUnreachableError(ImageGateError):
    """Raised when the provider could not be reached at all."""


class MalformedResponseError(ImageGateError):
    """Raised when a provider response has no image list."""
