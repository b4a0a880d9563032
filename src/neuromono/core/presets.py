"""Named conversion presets and preset-file loading."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import ConversionConfig
from .errors import ValidationError


@dataclass(frozen=True, slots=True)
class Preset:
    """Named set of conversion overrides; unset fields keep the base config."""

    name: str
    description: str = ""
    preserve_width: float | None = None
    preserve_richness: float | None = None
    volume_compensation: float | None = None
    quality: float | None = None
    spectral_analysis: bool | None = None
    sample_rate: int | None = None

    def overrides(self) -> dict[str, Any]:
        keys = (
            "preserve_width",
            "preserve_richness",
            "volume_compensation",
            "quality",
            "spectral_analysis",
            "sample_rate",
        )
        return {k: getattr(self, k) for k in keys if getattr(self, k) is not None}


BUILTIN_PRESETS: dict[str, Preset] = {
    "voice": Preset(
        name="voice",
        description="Speech and podcasts: narrow image, gentle richness, louder output",
        preserve_width=0.3,
        preserve_richness=0.6,
        volume_compensation=1.2,
    ),
    "music": Preset(
        name="music",
        description="Music: keep as much width and harmonic detail as possible",
        preserve_width=0.9,
        preserve_richness=0.95,
        volume_compensation=1.1,
    ),
    "fast": Preset(
        name="fast",
        description="Skip harmonic reinjection; moderate width and richness",
        preserve_width=0.5,
        preserve_richness=0.5,
        quality=0.5,
        spectral_analysis=False,
    ),
}


def load_presets(path: str | Path) -> dict[str, Preset]:
    """Load presets from a YAML/JSON file with a top-level `presets` list."""
    preset_path = Path(path)
    if not preset_path.exists():
        raise FileNotFoundError(f"Preset file not found: {preset_path}")
    text = preset_path.read_text(encoding="utf-8")
    if preset_path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except Exception as exc:
            raise RuntimeError("YAML preset files need pyyaml (pip install neuromono[yaml]).") from exc
        payload = yaml.safe_load(text)
    else:
        payload = json.loads(text)

    raw_presets = payload.get("presets") if isinstance(payload, dict) else None
    if not isinstance(raw_presets, list) or not raw_presets:
        raise RuntimeError(f"Preset file must define a non-empty 'presets' list: {preset_path}")

    out: dict[str, Preset] = {}
    for idx, item in enumerate(raw_presets):
        if not isinstance(item, dict):
            raise RuntimeError(f"Preset entry at index {idx} must be an object")
        name_raw = item.get("name")
        name = str(name_raw).strip() if name_raw is not None else f"preset_{idx + 1}"

        def _opt_float(field: str) -> float | None:
            val = item.get(field)
            return None if val is None else float(val)

        spectral = item.get("spectral_analysis")
        rate = item.get("sample_rate")
        out[name] = Preset(
            name=name,
            description=str(item.get("description", "")),
            preserve_width=_opt_float("preserve_width"),
            preserve_richness=_opt_float("preserve_richness"),
            volume_compensation=_opt_float("volume_compensation"),
            quality=_opt_float("quality"),
            spectral_analysis=None if spectral is None else bool(spectral),
            sample_rate=None if rate is None else int(rate),
        )
    return out


def resolve_preset(name: str, extra: dict[str, Preset] | None = None) -> Preset:
    catalog = {**BUILTIN_PRESETS, **(extra or {})}
    if name not in catalog:
        raise ValidationError(f"Unknown preset '{name}'; available: {sorted(catalog)}")
    return catalog[name]


def with_preset(base: ConversionConfig, preset: Preset) -> ConversionConfig:
    """Create a derived conversion config with preset overrides, clamped."""
    return base.with_overrides(**preset.overrides())
