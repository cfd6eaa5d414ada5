"""Report formatters for different output formats."""

from reporting.formatters.base import BaseFormatter
from reporting.formatters.html import HTMLFormatter
from reporting.formatters.markdown import MarkdownFormatter

__all__ = ["BaseFormatter", "HTMLFormatter", "MarkdownFormatter"]
