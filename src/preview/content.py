"""Locating, injecting and serving preview page content."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

CONFIG_GLOBAL = "__CONVEX_CONFIG__"

MIME_TYPES = {
    ".html": "text/html",
    ".js": "application/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".svg": "image/svg+xml",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def content_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def find_app_html(app_name: str, dist_dir: Path, source_dir: Path) -> Path | None:
    """First existing index.html among the nested build, flat build and source."""
    candidates = (
        dist_dir / "apps" / app_name / "index.html",
        dist_dir / app_name / "index.html",
        source_dir / app_name / "index.html",
    )
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def config_script(config: Mapping[str, Any]) -> str:
    payload = json.dumps(config, default=str).replace("</", "<\\/")
    return f"<script>\n  window.{CONFIG_GLOBAL} = {payload};\n</script>"


def inject_config(html: str, config: Mapping[str, Any]) -> str:
    """Insert the config script right after ``<head>`` so it runs first."""
    if "<head>" not in html:
        logger.debug("No <head> tag found; serving page without injected config")
        return html
    return html.replace("<head>", f"<head>\n{config_script(config)}", 1)


def resolve_asset(assets_dir: Path, request_path: str) -> Path | None:
    """Map ``.../assets/<file>`` onto ``assets_dir``; None when missing or outside it."""
    if "/assets/" not in request_path:
        return None
    relative = request_path.rsplit("/assets/", 1)[1]
    if not relative:
        return None
    root = assets_dir.resolve()
    candidate = (root / relative).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


__all__ = [
    "CONFIG_GLOBAL",
    "DEFAULT_MIME_TYPE",
    "MIME_TYPES",
    "config_script",
    "content_type_for",
    "find_app_html",
    "inject_config",
    "resolve_asset",
]
