"""
Markdown report — Evidence tables and their sources rendered via Jinja2.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models import Report


TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "evidence_report.md.j2"


def _md_cell(value) -> str:
    """Escape a value for use inside a Markdown table cell."""
    return str(value).replace("|", "\\|").replace("\n", " ")


def render_markdown(
    report: Report,
    receptor_type: str,
    error: Optional[Exception] = None,
    generated_utc: Optional[str] = None,
) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["md_cell"] = _md_cell
    template = env.get_template(TEMPLATE_NAME)
    return template.render(
        receptor_type=receptor_type,
        generated_utc=generated_utc
        or datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        evidences=report.evidences,
        error=error,
    )


def export_markdown(
    report: Report,
    receptor_type: str,
    output_dir: Path,
    run_id: str,
    error: Optional[Exception] = None,
) -> Path:
    """Write the Markdown evidence report and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"{receptor_type}_report_{run_id}.md"

    with open(filepath, "w", encoding="utf-8") as fh:
        fh.write(render_markdown(report, receptor_type, error))

    return filepath
