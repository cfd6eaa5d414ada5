"""Local browser previews for rendered reports."""

from preview.app import create_preview_app
from preview.content import (
    CONFIG_GLOBAL,
    MIME_TYPES,
    content_type_for,
    find_app_html,
    inject_config,
    resolve_asset,
)
from preview.server import PreviewRegistry, PreviewSession

__all__ = [
    "CONFIG_GLOBAL",
    "MIME_TYPES",
    "PreviewRegistry",
    "PreviewSession",
    "content_type_for",
    "create_preview_app",
    "find_app_html",
    "inject_config",
    "resolve_asset",
]
