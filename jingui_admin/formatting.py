"""Display helpers for CLI output."""

from __future__ import annotations

from datetime import datetime


def format_date(value: datetime | None) -> str:
    """'Mar 4, 2025' style date, or '-' when unknown."""
    if value is None:
        return "-"
    return f"{value:%b} {value.day}, {value.year}"


def format_datetime(value: datetime | None) -> str:
    """'Mar 4, 2025 09:15' style timestamp, or '-' when unknown."""
    if value is None:
        return "-"
    return f"{format_date(value)} {value:%H:%M}"


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "…"


def mask_value(value: str, *, reveal: bool = False) -> str:
    """Hide a secret field value unless explicitly revealed. Empty means redacted."""
    if not value:
        return "(redacted)"
    if reveal:
        return value
    return "•" * min(len(value), 8)
