"""Argument parsing shared by the MCP tools (all ids arrive as strings)."""

from __future__ import annotations

from typing import Any


def parse_id(value: Any) -> int | None:
    """Positive int or None."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def parse_page(value: Any) -> int | None:
    if value is None or value == "":
        return 1
    return parse_id(value)


def optional_str(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
