"""Report generator coordinating the Markdown and HTML formatters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from reporting.formatters import HTMLFormatter, MarkdownFormatter
from reporting.schemas import ReportBase


class ReportGenerator:
    """Renders one report payload in both output formats."""

    def __init__(self, template_dir: Path | None = None, inline_assets: bool = True):
        """
        Initialize report generator.

        Args:
            template_dir: Override for the bundled template directory
            inline_assets: Inline CSS/JS into HTML output
        """
        self.markdown = MarkdownFormatter(template_dir)
        self.html = HTMLFormatter(template_dir, inline_assets=inline_assets)

    def render_markdown(self, report: ReportBase) -> str:
        return self.markdown.format(report)

    def render_html(self, report: ReportBase) -> str:
        return self.html.format(report)

    def render_app_not_found(
        self, app_name: str, config: dict[str, Any], error: str
    ) -> str:
        """Fallback page that still shows the config the app would have received."""
        return self.html.render(
            "app_not_found.html.j2",
            app_name=app_name,
            error=error,
            config_json=json.dumps(config, indent=2, default=str),
        )

    def write_html(self, report: ReportBase, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render_html(report), encoding="utf-8")
        return output_path


__all__ = ["ReportGenerator"]
