"""Utility helpers for the MoviePro service."""

from __future__ import annotations

import base64
from datetime import date, datetime

from .exceptions import ParseError


API_DATE_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%b %d, %Y"


def join_url(base: str, *segments: str) -> str:
    """Join URL segments with exactly one slash between each part."""

    parts = [base.rstrip("/")]
    parts.extend(segment.strip("/") for segment in segments if segment)
    return "/".join(part for part in parts if part)


def parse_api_date(value: str | None, *, field: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` string returned by TMDB."""

    if not isinstance(value, str) or not value.strip():
        raise ParseError(field, value)
    try:
        return datetime.strptime(value.strip(), API_DATE_FORMAT).date()
    except ValueError as exc:
        raise ParseError(field, value) from exc


def format_display_date(value: date) -> str:
    """Return dates like ``Jan 05, 1990``."""

    return value.strftime(DISPLAY_DATE_FORMAT)


def build_data_url(data: bytes, content_type: str | None) -> str | None:
    """Render encoded image bytes as an inline ``data:`` URL."""

    if not data:
        return None
    mime = content_type or "application/octet-stream"
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"
