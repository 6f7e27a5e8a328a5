"""Structured logging bridge."""

from __future__ import annotations

from imagegate.util.logger import get_logger

event_logger = get_logger("events")


def log_event(event: str, *, request_id: str = "-", provider: str = "-", **payload: object) -> None:
    """One line per request outcome; ``request_id`` and ``provider`` lead so lines can be grepped."""
    event_logger.info("event=%s id=%s provider=%s payload=%s", event, request_id, provider, payload)
