"""Markdown formatter for console and tool-response output."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from reporting.formatters.base import BaseFormatter
from reporting.schemas import ReportBase


class MarkdownFormatter(BaseFormatter):
    """Formatter for the text rendering returned to the tool caller."""

    extension = "md"

    def __init__(self, template_dir: Path | None = None):
        """
        Initialize Markdown formatter.

        Args:
            template_dir: Directory containing Markdown templates
        """
        super().__init__(template_dir)
        self._setup_jinja_env()

    def _setup_jinja_env(self) -> None:
        """Setup Jinja2 environment for Markdown."""
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._register_filters(self.jinja_env)

    def format(self, data: ReportBase) -> str:
        """Format report data as Markdown."""
        template = self.jinja_env.get_template(self.template_name(data))
        return template.render(data=data).rstrip() + "\n"
