"""Write conversion reports to JSON and CSV."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _flatten(prefix: str, value: Any, rows: list[dict[str, Any]]) -> None:
    if isinstance(value, dict):
        for key, sub in value.items():
            _flatten(f"{prefix}.{key}" if prefix else str(key), sub, rows)
        return
    rows.append({"metric": prefix, "value": value})


def _summary_rows(report: dict[str, Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for section in ("analysis", "mix_weights", "output"):
        _flatten(section, report.get(section, {}), rows)
    return rows


def save_json(report: dict[str, Any], path: str | Path) -> Path:
    """Write the report document as indented JSON."""
    p = Path(path)
    _ensure_parent(p)
    with p.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    return p


def _write_table(path: str | Path, rows: list[dict[str, Any]], columns: list[str]) -> Path:
    p = Path(path)
    _ensure_parent(p)
    with p.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
    return p


def save_csv(report: dict[str, Any], path: str | Path) -> Path:
    """Write analysis, weights and output stats as `metric,value` rows."""
    return _write_table(path, _summary_rows(report), ["metric", "value"])


BATCH_FIELDS = [
    "input",
    "output",
    "width",
    "richness",
    "phase_correlation",
    "rms_level",
    "output_rms",
]


def save_batch_csv(rows: list[dict[str, Any]], path: str | Path) -> Path:
    """Write one row per batch input."""
    return _write_table(path, [{k: row.get(k) for k in BATCH_FIELDS} for row in rows], BATCH_FIELDS)
