"""Configuration model for stereo-to-mono conversion."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Literal

from .errors import ValidationError
from .signal import RESAMPLERS


Resampler = Literal["linear", "polyphase"]

UNIT_RANGE = (0.0, 1.0)
VOLUME_RANGE = (0.5, 2.0)


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    return max(bounds[0], min(bounds[1], float(value)))


@dataclass(frozen=True, slots=True)
class ConversionConfig:
    """Immutable per-call conversion parameters.

    `quality` is accepted and recorded but does not change processing.
    `seed` selects a seeded network parameterization; None keeps the
    built-in constants.
    """

    preserve_width: float = 0.7
    preserve_richness: float = 0.8
    volume_compensation: float = 1.1
    quality: float = 0.8
    spectral_analysis: bool = True
    sample_rate: int | None = None
    resampler: Resampler = "linear"
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.sample_rate is not None and (
            isinstance(self.sample_rate, bool) or int(self.sample_rate) != self.sample_rate or self.sample_rate <= 0
        ):
            raise ValidationError(f"sample_rate must be a positive integer, got {self.sample_rate!r}")
        if self.resampler not in RESAMPLERS:
            raise ValidationError(f"Unknown resampler '{self.resampler}'; expected one of {RESAMPLERS}")

    def with_overrides(self, **overrides: Any) -> "ConversionConfig":
        """Return a copy with `overrides` applied and ranged fields clamped."""
        unknown = set(overrides) - set(self.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown conversion option(s): {sorted(unknown)}")
        return replace(self, **overrides).clamped()

    def clamped(self) -> "ConversionConfig":
        return replace(
            self,
            preserve_width=_clamp(self.preserve_width, UNIT_RANGE),
            preserve_richness=_clamp(self.preserve_richness, UNIT_RANGE),
            volume_compensation=_clamp(self.volume_compensation, VOLUME_RANGE),
            quality=_clamp(self.quality, UNIT_RANGE),
            spectral_analysis=bool(self.spectral_analysis),
            sample_rate=int(self.sample_rate) if self.sample_rate is not None else None,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
