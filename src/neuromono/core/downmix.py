"""Multi-stage stereo-to-mono downmix.

Stages run strictly in order, each consuming the previous output:

1. analyze the stereo buffer
2. map the analysis features to MixWeights
3. weighted L/R blend plus half-strength side signal
4. windowed side-signal reinjection for harmonically rich material
5. recursive first-difference high-frequency emphasis
6. RMS loudness compensation scaled by stereo width
7. tanh soft clip at 0.95

Intermediate signals are stored as float32 after every stage, matching the
precision of the input buffers.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import numpy as np

from .analyzer import AnalysisResult, StereoAnalyzer
from .audio import StereoBuffer
from .config import ConversionConfig
from .signal import hann_window, normalize, soft_clip
from .weights import MixWeights, WeightMapper


SIDE_MIX = 0.5
HARMONIC_SCALE = 0.5
HARMONIC_WINDOW = 512
HARMONIC_MIX = 0.15
RICHNESS_GATE = 0.3
HIGH_BAND_GATE = 0.2
HIGH_EMPHASIS = 0.2
WIDTH_LOUDNESS = 0.15
LIMIT_THRESHOLD = 0.95


@lru_cache(maxsize=8)
def _seeded_mapper(seed: int) -> WeightMapper:
    return WeightMapper.from_seed(seed)


@dataclass(frozen=True, slots=True)
class DownmixResult:
    """Mono output together with the analysis and weights that produced it."""

    mono: np.ndarray
    analysis: AnalysisResult
    weights: MixWeights


class Downmixer:
    """Stateless orchestrator of the downmix stages.

    Holds only read-only collaborators, so one instance may be shared by
    threads as long as each call passes its own buffer and config.
    """

    def __init__(self, analyzer: StereoAnalyzer | None = None, mapper: WeightMapper | None = None) -> None:
        self.analyzer = analyzer or StereoAnalyzer()
        self.mapper = mapper or WeightMapper()

    def analyze(self, buffer: StereoBuffer) -> AnalysisResult:
        return self.analyzer.analyze(buffer)

    def mix_weights(self, analysis: AnalysisResult, config: ConversionConfig | None = None) -> MixWeights:
        mapper = self.mapper
        if config is not None and config.seed is not None:
            mapper = _seeded_mapper(int(config.seed))
        return mapper.map_features(analysis.feature_vector())

    def convert(self, buffer: StereoBuffer, config: ConversionConfig | None = None) -> np.ndarray:
        return self.process(buffer, config).mono

    def process(self, buffer: StereoBuffer, config: ConversionConfig | None = None) -> DownmixResult:
        cfg = config or ConversionConfig()
        analysis = self.analyze(buffer)
        weights = self.mix_weights(analysis, cfg)

        mono = mix_channels(buffer, weights, cfg.preserve_width)
        if cfg.preserve_richness != 0:
            if cfg.spectral_analysis and analysis.richness > RICHNESS_GATE:
                mono = reinject_harmonics(mono, buffer, cfg.preserve_richness * analysis.richness)
            if analysis.frequency_distribution.high > HIGH_BAND_GATE:
                factor = 1.0 + analysis.frequency_distribution.high * HIGH_EMPHASIS * cfg.preserve_richness
                mono = emphasize_high_frequencies(mono, factor)
        mono = compensate_loudness(mono, analysis, cfg.volume_compensation)
        mono = soft_clip(mono, LIMIT_THRESHOLD)
        return DownmixResult(mono=mono, analysis=analysis, weights=weights)


def mix_channels(buffer: StereoBuffer, weights: MixWeights, preserve_width: float) -> np.ndarray:
    """Weighted L/R blend; folds the scaled side signal back in at half strength."""
    left = np.asarray(buffer.left, dtype=np.float64)
    right = np.asarray(buffer.right, dtype=np.float64)
    mid = left * weights.left_weight + right * weights.right_weight
    if preserve_width > 0:
        side = (left - right) * weights.side_gain * preserve_width
        return (mid + side * SIDE_MIX).astype(np.float32)
    return mid.astype(np.float32)


def harmonic_content(buffer: StereoBuffer) -> np.ndarray:
    """Half-scaled side signal smoothed by overlapping in-place Hann windows.

    Blocks start every half window and are windowed over the already
    windowed output of the previous block.
    """
    left = np.asarray(buffer.left, dtype=np.float64)
    right = np.asarray(buffer.right, dtype=np.float64)
    harmonic = ((left - right) * HARMONIC_SCALE).astype(np.float32)
    n = harmonic.shape[0]
    size = min(HARMONIC_WINDOW, n)
    hop = size / 2
    pos = 0.0
    while pos < n:
        start = int(pos)
        end = int(min(pos + size, n))
        harmonic[start:end] = hann_window(harmonic[start:end])
        pos += hop
    return harmonic


def reinject_harmonics(mono: np.ndarray, buffer: StereoBuffer, richness_factor: float) -> np.ndarray:
    harmonic = harmonic_content(buffer).astype(np.float64)
    out = np.asarray(mono, dtype=np.float64) + harmonic * richness_factor * HARMONIC_MIX
    return out.astype(np.float32)


def emphasize_high_frequencies(samples: np.ndarray, factor: float) -> np.ndarray:
    """Add back a first-difference component, scanning left to right.

    Each step reads the previous sample after it has been emphasized, so
    the result is recursive rather than an elementwise map.

    The scan is a plain Python loop over float32-rounded values, roughly
    one interpreter step per sample: a ten minute 44.1 kHz file takes
    about 26 million steps, on the order of seconds.
    """
    out = np.array(samples, dtype=np.float32)
    if out.shape[0] < 2:
        return out
    gain = factor - 1.0
    f32 = np.float32
    values = out.tolist()
    prev = values[0]
    for i in range(1, len(values)):
        cur = values[i]
        high = (cur - prev) * 0.5
        cur = float(f32(cur + high * gain))
        values[i] = cur
        prev = cur
    return np.array(values, dtype=np.float32)


def compensate_loudness(samples: np.ndarray, analysis: AnalysisResult, volume_compensation: float) -> np.ndarray:
    """Normalize to the stereo mid RMS, boosted for volume and for width."""
    target = analysis.rms_level * volume_compensation
    target *= 1.0 + analysis.width * WIDTH_LOUDNESS
    return normalize(samples, target)
