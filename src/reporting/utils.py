"""Utility functions for report generation."""

from __future__ import annotations

import json
import math
import time

from markupsafe import Markup, escape

DARK_THEMES = {"tokyo-night", "dracula", "nord"}


def is_dark_theme(theme: str) -> bool:
    return "dark" in theme or theme in DARK_THEMES


def format_number(num: float) -> str:
    """Compact display value: 2.5M, 1.5k, 999, 3.14."""
    if not math.isfinite(num):
        return "0"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}k"
    if float(num).is_integer():
        return str(int(num))
    return f"{num:.2f}"


def format_time_ago(timestamp_ms: float, now_ms: float | None = None) -> str:
    """Relative age of an epoch-millis timestamp."""
    now_ms = time.time() * 1000 if now_ms is None else now_ms
    diff = now_ms - timestamp_ms
    minutes = math.floor(diff / 60_000)
    hours = math.floor(diff / 3_600_000)
    days = math.floor(diff / 86_400_000)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    return f"{days}d ago"


def plural(count: float, word: str) -> str:
    return f"{format_number(count)} {word}{'' if count == 1 else 's'}"


def heat_bar(value: float, maximum: float, width: int = 10) -> str:
    if maximum <= 0:
        return ""
    filled = max(math.floor(value / maximum * width + 0.5), 0)
    return "█" * filled + "░" * max(width - filled, 0)


def heat_color(intensity: float, dark: bool) -> str:
    """Interpolate from the page background to a hot orange."""
    clamped = max(0.0, min(1.0, intensity))
    base = (34, 34, 34) if dark else (250, 248, 245)
    hot = (210, 120, 60) if dark else (235, 126, 52)
    r, g, b = (round(lo + (hi - lo) * clamped) for lo, hi in zip(base, hot))
    return f"rgb({r}, {g}, {b})"


def pretty_json(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def escape_html(value: object) -> Markup:
    """Escape ``& < > " '`` unless the value is already :class:`Markup`."""
    return escape(value)


def md_cell(value: object) -> str:
    """Keep a value inside one Markdown table cell."""
    text = "" if value is None else str(value)
    return text.replace("|", "\\|").replace("\r", " ").replace("\n", " ")


__all__ = [
    "escape_html",
    "format_number",
    "format_time_ago",
    "heat_bar",
    "heat_color",
    "is_dark_theme",
    "md_cell",
    "plural",
    "pretty_json",
]
