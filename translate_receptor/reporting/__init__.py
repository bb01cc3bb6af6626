"""Reporting package — report serialisation for the CLI host."""

from .json_export import export_json, report_to_dict
from .markdown_report import export_markdown, render_markdown

__all__ = [
    "export_json",
    "report_to_dict",
    "export_markdown",
    "render_markdown",
]
