"""
JSON exporter — Serialises a receptor report with its metadata.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .. import __version__
from ..models import Report


def report_to_dict(
    report: Report,
    receptor_type: str,
    error: Optional[Exception] = None,
    generated_utc: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "metadata": {
            "receptor": receptor_type,
            "version": __version__,
            "generated_utc": generated_utc or datetime.now(timezone.utc).isoformat(),
            "complete": error is None,
            "error": str(error) if error else None,
        },
        **report.to_dict(),
    }


def export_json(
    report: Report,
    receptor_type: str,
    output_dir: Path,
    run_id: str,
    error: Optional[Exception] = None,
) -> Path:
    """
    Write the report to a JSON file.

    Returns:
        Path to the created JSON file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"{receptor_type}_report_{run_id}.json"

    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(
            report_to_dict(report, receptor_type, error),
            fh,
            indent=2,
            default=str,
            ensure_ascii=False,
        )

    return filepath
