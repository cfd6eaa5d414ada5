"""Base formatter interface."""

from abc import ABC, abstractmethod
from pathlib import Path

from jinja2 import Environment

from analytics.kanban import ascii_board
from reporting.schemas import ReportBase
from reporting.utils import (
    format_number,
    format_time_ago,
    heat_bar,
    heat_color,
    md_cell,
    plural,
    pretty_json,
)


class BaseFormatter(ABC):
    """Abstract base class for report formatters."""

    extension: str = ""

    def __init__(self, template_dir: Path | None = None):
        """
        Initialize formatter.

        Args:
            template_dir: Directory containing templates for this formatter
        """
        self.template_dir = template_dir or self._get_default_template_dir()

    @abstractmethod
    def format(self, data: ReportBase) -> str:
        """
        Format report data into the target format.

        Args:
            data: One of the report payloads from ``reporting.schemas``

        Returns:
            Rendered document text
        """
        pass

    def template_name(self, data: ReportBase) -> str:
        return f"{getattr(data, 'kind')}.{self.extension}.j2"

    def _register_filters(self, env: Environment) -> None:
        env.filters["format_number"] = format_number
        env.filters["time_ago"] = format_time_ago
        env.filters["heat_bar"] = heat_bar
        env.filters["heat_color"] = heat_color
        env.filters["md_cell"] = md_cell
        env.filters["plural"] = plural
        env.filters["pretty_json"] = pretty_json
        env.filters["ascii_board"] = ascii_board

    def _get_default_template_dir(self) -> Path:
        """Get default template directory for this formatter."""
        module_dir = Path(__file__).parent.parent
        return module_dir / "templates" / "default"
