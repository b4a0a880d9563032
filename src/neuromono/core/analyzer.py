"""Single-pass stereo feature extraction.

The analyzer reduces a StereoBuffer to an immutable AnalysisResult holding
stereo width, zero-lag phase correlation, mid-signal RMS, channel peak, a
zero-crossing based richness estimate and a coarse three-band energy split.

Richness and band energy are estimated over bounded prefixes of the buffer
(RICHNESS_PREFIX and BAND_PREFIX samples). Both limits are tunables that
trade accuracy on long material for constant cost; changing them changes
output.

References:
- Zero-crossing rate as a brightness/noisiness proxy:
  Kedem (1986), "Spectral analysis and discrimination by zero-crossings",
  Proc. IEEE 74(11).
- Zero-lag normalized cross-correlation (phase correlation meter):
  IEC 60268-18 style goniometer/correlation readouts.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .audio import StereoBuffer
from .errors import ValidationError


RICHNESS_PREFIX = 8192
RICHNESS_WINDOW = 256
RICHNESS_HOP = RICHNESS_WINDOW // 2
RICHNESS_SCALE = 10.0

BAND_PREFIX = 4096
LOW_BAND_LIMIT = 0.1
HIGH_BAND_LIMIT = 0.3

FEATURE_NAMES = (
    "width",
    "richness",
    "rms_level",
    "peak_level",
    "phase_correlation_unit",
    "freq_low",
    "freq_mid",
    "freq_high",
)


@dataclass(frozen=True, slots=True)
class FrequencyDistribution:
    """Share of sampled energy per first-difference band; sums to 1 or is all zero."""

    low: float = 0.0
    mid: float = 0.0
    high: float = 0.0


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Stereo characteristics of one buffer."""

    width: float
    richness: float
    rms_level: float
    peak_level: float
    phase_correlation: float
    frequency_distribution: FrequencyDistribution

    def feature_vector(self) -> np.ndarray:
        """Eight-value feature vector in FEATURE_NAMES order.

        Phase correlation is shifted from [-1, 1] into [0, 1].
        """
        fd = self.frequency_distribution
        return np.array(
            [
                self.width,
                self.richness,
                self.rms_level,
                self.peak_level,
                (self.phase_correlation + 1.0) / 2.0,
                fd.low,
                fd.mid,
                fd.high,
            ],
            dtype=np.float32,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _window_harmonic_content(windows: np.ndarray) -> np.ndarray:
    # windows: [num_windows, window_size]
    size = windows.shape[1]
    crossings = np.count_nonzero(windows[:, 1:] * windows[:, :-1] < 0.0, axis=1)
    zcr = crossings / size
    energy = np.sqrt(np.sum(windows * windows, axis=1) / size)
    return zcr * energy * RICHNESS_SCALE


class StereoAnalyzer:
    """Extract stereo features from a StereoBuffer.

    Instances hold only the prefix/window tunables and are safe to share
    between threads.
    """

    def __init__(
        self,
        richness_prefix: int = RICHNESS_PREFIX,
        richness_window: int = RICHNESS_WINDOW,
        band_prefix: int = BAND_PREFIX,
    ) -> None:
        if richness_window < 2:
            raise ValidationError("richness_window must be >= 2")
        self.richness_prefix = int(richness_prefix)
        self.richness_window = int(richness_window)
        self.richness_hop = self.richness_window // 2
        self.band_prefix = int(band_prefix)

    def analyze(self, buffer: StereoBuffer) -> AnalysisResult:
        if buffer is None:
            raise ValidationError("No buffer given to analyze")
        left = np.asarray(buffer.left, dtype=np.float64)
        right = np.asarray(buffer.right, dtype=np.float64)
        n = left.shape[0]
        if n == 0 or right.shape[0] != n:
            raise ValidationError(f"Invalid stereo buffer: left={n} right={right.shape[0]}")

        diff = np.abs(left - right)
        mid = (left + right) / 2.0
        width = float(np.minimum(1.0, np.sum(diff) / n))
        rms_level = float(np.sqrt(np.sum(mid * mid) / n))
        peak_level = float(np.max(np.maximum(np.abs(left), np.abs(right))))

        left_rms = np.sqrt(np.sum(left * left) / n)
        right_rms = np.sqrt(np.sum(right * right) / n)
        norm = float(left_rms * right_rms)
        phase_correlation = float(np.sum(left * right) / n / norm) if norm > 0.0 else 0.0

        return AnalysisResult(
            width=width,
            richness=self.richness(left, right),
            rms_level=rms_level,
            peak_level=peak_level,
            phase_correlation=phase_correlation,
            frequency_distribution=self.frequency_distribution(left, right),
        )

    def richness(self, left: np.ndarray, right: np.ndarray) -> float:
        """Mean zero-crossing-rate x RMS over 50%-overlapping windows of the prefix."""
        length = min(left.shape[0], self.richness_prefix)
        size = self.richness_window
        hop = self.richness_hop
        span = length - size
        # Starts run while start < length - size. The divisor is
        # floor(span / hop) * 2, which can undercount the windows visited.
        divisor = (span // hop) * 2 if span > 0 else 0
        if divisor <= 0:
            return 0.0
        starts = np.arange(0, span, hop)
        total = 0.0
        for channel in (left[:length], right[:length]):
            windows = sliding_window_view(channel, size)[starts]
            total += float(np.sum(_window_harmonic_content(windows)))
        return float(np.minimum(1.0, total / divisor))

    def frequency_distribution(self, left: np.ndarray, right: np.ndarray) -> FrequencyDistribution:
        """Split prefix energy by averaged first-difference magnitude into three bands."""
        length = min(left.shape[0], self.band_prefix)
        if length < 2:
            return FrequencyDistribution()
        lw = left[:length]
        rw = right[:length]
        step = (np.abs(np.diff(lw)) + np.abs(np.diff(rw))) / 2.0
        energy = np.abs(lw[1:]) + np.abs(rw[1:])

        low = float(np.sum(energy[step < LOW_BAND_LIMIT]))
        mid = float(np.sum(energy[(step >= LOW_BAND_LIMIT) & (step < HIGH_BAND_LIMIT)]))
        # NaN steps land in the high band so they reach the result.
        high = float(np.sum(energy[~(step < HIGH_BAND_LIMIT)]))
        total = low + mid + high
        if total <= 0.0:
            return FrequencyDistribution()
        return FrequencyDistribution(low=low / total, mid=mid / total, high=high / total)


def analyze_stereo(buffer: StereoBuffer) -> AnalysisResult:
    """Analyze with default tunables."""
    return StereoAnalyzer().analyze(buffer)
