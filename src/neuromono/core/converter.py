"""Fluent conversion facade and module-level shortcuts.

The facade clamps user parameters into an immutable ConversionConfig,
resamples the buffer when a target rate is configured, and hands both to a
shared Downmixer. Setters swap in a new config snapshot; a conversion
running on another thread keeps the snapshot it started with.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from .analyzer import AnalysisResult
from .audio import StereoBuffer
from .config import ConversionConfig
from .downmix import Downmixer, DownmixResult
from .presets import Preset, with_preset
from .signal import resample


_SHARED_DOWNMIXER: Downmixer | None = None


def _shared_downmixer() -> Downmixer:
    global _SHARED_DOWNMIXER
    if _SHARED_DOWNMIXER is None:
        _SHARED_DOWNMIXER = Downmixer()
    return _SHARED_DOWNMIXER


def prepare_buffer(buffer: StereoBuffer, config: ConversionConfig) -> StereoBuffer:
    """Resample both channels to `config.sample_rate` when it differs from the buffer."""
    target = config.sample_rate
    if not target or target == buffer.sample_rate:
        return buffer
    return StereoBuffer(
        left=resample(buffer.left, buffer.sample_rate, target, method=config.resampler),
        right=resample(buffer.right, buffer.sample_rate, target, method=config.resampler),
        sample_rate=target,
    )


class Converter:
    """Chainable stereo-to-mono converter.

    Example::

        mono = Converter().preserve_width(0.9).preserve_richness(0.95).convert(buf)
    """

    def __init__(self, config: ConversionConfig | None = None, downmixer: Downmixer | None = None) -> None:
        self._config = (config or ConversionConfig()).clamped()
        self._downmixer = downmixer or _shared_downmixer()

    @property
    def options(self) -> ConversionConfig:
        return self._config

    def _update(self, **overrides: Any) -> "Converter":
        self._config = self._config.with_overrides(**overrides)
        return self

    def preserve_width(self, level: float) -> "Converter":
        return self._update(preserve_width=level)

    def preserve_richness(self, level: float) -> "Converter":
        return self._update(preserve_richness=level)

    def volume_compensation(self, factor: float) -> "Converter":
        return self._update(volume_compensation=factor)

    def quality(self, level: float) -> "Converter":
        return self._update(quality=level)

    def spectral_analysis(self, enabled: bool) -> "Converter":
        return self._update(spectral_analysis=enabled)

    def sample_rate(self, rate: int | None) -> "Converter":
        return self._update(sample_rate=rate)

    def resampler(self, method: str) -> "Converter":
        return self._update(resampler=method)

    def preset(self, preset: Preset) -> "Converter":
        self._config = with_preset(self._config, preset)
        return self

    def set_options(self, **options: Any) -> "Converter":
        return self._update(**options)

    def get_options(self) -> dict[str, Any]:
        return self._config.as_dict()

    def process(self, buffer: StereoBuffer) -> DownmixResult:
        cfg = self._config
        return self._downmixer.process(prepare_buffer(buffer, cfg), cfg)

    def convert(self, buffer: StereoBuffer) -> np.ndarray:
        return self.process(buffer).mono

    def analyze(self, buffer: StereoBuffer) -> AnalysisResult:
        return self._downmixer.analyze(buffer)


def create_converter(**options: Any) -> Converter:
    """Create a Converter, applying (and clamping) any keyword options."""
    converter = Converter()
    if options:
        converter.set_options(**options)
    return converter


def convert(buffer: StereoBuffer, **options: Any) -> np.ndarray:
    return create_converter(**options).convert(buffer)


def analyze(buffer: StereoBuffer) -> AnalysisResult:
    return create_converter().analyze(buffer)
