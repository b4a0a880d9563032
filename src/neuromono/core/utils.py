"""Serialization and provenance helpers."""

from __future__ import annotations

import hashlib
import json
import platform
from dataclasses import asdict, is_dataclass
from importlib import metadata
from pathlib import Path
from typing import Any

import numpy as np


def canonicalize(value: Any) -> Any:
    """Turn configs, results and numpy values into plain JSON types with sorted keys."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, dict):
        return {str(k): canonicalize(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple, np.ndarray)):
        return [canonicalize(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Path):
        return str(value)
    return value


def config_hash(config: Any) -> str:
    """SHA-256 of the canonical JSON form; equal configs hash equally."""
    payload = json.dumps(canonicalize(config), sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def library_versions(
    package_names: list[str] | None = None,
) -> dict[str, str | None]:
    """Collect runtime library versions recorded in reports."""
    names = package_names or ["numpy", "scipy", "soundfile"]
    out: dict[str, str | None] = {"python": platform.python_version()}
    for name in names:
        try:
            out[name] = metadata.version(name)
        except metadata.PackageNotFoundError:
            out[name] = None
    return out
