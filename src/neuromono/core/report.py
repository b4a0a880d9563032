"""Report documents describing one conversion."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from neuromono import __version__

from .audio import StereoBuffer
from .config import ConversionConfig
from .converter import Converter
from .downmix import DownmixResult
from .signal import peak, rms
from .utils import canonicalize, config_hash, library_versions


def report_from_result(
    buffer: StereoBuffer,
    config: ConversionConfig,
    result: DownmixResult,
    source_path: str | None = None,
) -> dict[str, Any]:
    """Describe a finished conversion as a JSON-ready document."""
    out = result.mono
    return {
        "neuromono_version": __version__,
        "analysis_time_utc": datetime.now(timezone.utc).isoformat(),
        "config_hash": config_hash(config),
        "library_versions": library_versions(),
        "metadata": {
            "source_path": source_path,
            "sample_rate": buffer.sample_rate,
            "num_samples": buffer.num_samples,
            "duration_s": buffer.duration_s,
            "channels": 2,
        },
        "config": canonicalize(config),
        "analysis": canonicalize(result.analysis),
        "mix_weights": result.weights.as_dict(),
        "output": {
            "num_samples": int(out.shape[0]),
            "sample_rate": config.sample_rate or buffer.sample_rate,
            "rms": rms(out),
            "peak": peak(out),
        },
    }


def build_report(
    buffer: StereoBuffer,
    config: ConversionConfig | None = None,
    source_path: str | None = None,
) -> dict[str, Any]:
    """Convert `buffer` with `config` and report on the run."""
    converter = Converter(config)
    result = converter.process(buffer)
    return report_from_result(buffer, converter.options, result, source_path=source_path)
