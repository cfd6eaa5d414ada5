"""HTML formatter for the browser preview."""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from reporting.formatters.base import BaseFormatter
from reporting.schemas import ReportBase


class HTMLFormatter(BaseFormatter):
    """Formatter for self-contained, themed HTML reports.

    Autoescaping is always on, so document content and log text can only reach
    the page as escaped text. The only raw insertions are the bundled CSS and
    JS, which are wrapped in :class:`~markupsafe.Markup` here.
    """

    extension = "html"

    def __init__(self, template_dir: Path | None = None, inline_assets: bool = True):
        """
        Initialize HTML formatter.

        Args:
            template_dir: Directory containing HTML templates
            inline_assets: Whether to inline CSS and JS (default: True)
        """
        super().__init__(template_dir)
        self.inline_assets = inline_assets
        self._setup_jinja_env()

    def _setup_jinja_env(self) -> None:
        """Setup Jinja2 environment with custom filters."""
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(
                enabled_extensions=("html", "html.j2"),
                default_for_string=True,
                default=True,
            ),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._register_filters(self.jinja_env)

    def _asset(self, name: str) -> Markup | None:
        if not self.inline_assets:
            return None
        path = self.template_dir / name
        if not path.exists():
            return None
        return Markup(path.read_text(encoding="utf-8"))

    def render(self, template_name: str, **context: Any) -> str:
        template = self.jinja_env.get_template(template_name)
        return template.render(
            inline_css=self._asset("styles.css"),
            inline_js=self._asset("interactive.js"),
            **context,
        )

    def format(self, data: ReportBase) -> str:
        """Format report data as interactive HTML."""
        return self.render(self.template_name(data), data=data)
