"""Stateless sample-level helpers shared by the analyzer and the downmixer.

All helpers accept 1-D sample arrays, compute in float64 and return new
float32 arrays; inputs are never modified.

References:
- Hann window: Blackman & Tukey (1958), "The Measurement of Power Spectra".
- Polyphase resampling option:
  SciPy `signal.resample_poly` documentation.
"""

from __future__ import annotations

from math import gcd

import numpy as np
from scipy.signal import resample_poly

from .errors import ValidationError


RESAMPLERS = ("linear", "polyphase")


def _as_f64(samples: np.ndarray) -> np.ndarray:
    return np.asarray(samples, dtype=np.float64).reshape(-1)


def rms(samples: np.ndarray) -> float:
    """Root mean square level; 0.0 for an empty array."""
    x = _as_f64(samples)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.sum(x * x) / x.size))


def peak(samples: np.ndarray) -> float:
    """Absolute peak level; 0.0 for an empty array."""
    x = _as_f64(samples)
    if x.size == 0:
        return 0.0
    return float(np.max(np.abs(x)))


def hann_window(samples: np.ndarray) -> np.ndarray:
    """Multiply by a symmetric Hann window `0.5 * (1 - cos(2*pi*i / (N - 1)))`."""
    x = _as_f64(samples)
    n = x.size
    if n == 0:
        return np.zeros(0, dtype=np.float32)
    if n == 1:
        # Single-point window is defined as 1.0 (numpy.hanning convention).
        return x.astype(np.float32)
    i = np.arange(n, dtype=np.float64)
    window = 0.5 * (1.0 - np.cos((2.0 * np.pi * i) / (n - 1)))
    return (x * window).astype(np.float32)


def normalize(samples: np.ndarray, target_rms: float) -> np.ndarray:
    """Scale to `target_rms`, clamping every sample to [-1, 1].

    A zero-RMS input is returned unchanged (as a copy).
    """
    x = _as_f64(samples)
    current = rms(x)
    if current == 0.0:
        return x.astype(np.float32)
    gain = float(target_rms) / current
    return np.clip(x * gain, -1.0, 1.0).astype(np.float32)


def soft_clip(samples: np.ndarray, threshold: float = 0.9) -> np.ndarray:
    """Tanh knee limiter; samples with `|x| <= threshold` pass through untouched."""
    x = _as_f64(samples)
    ax = np.abs(x)
    over = ax > threshold
    out = x.copy()
    if np.any(over):
        knee = 1.0 - threshold
        sign = np.where(x[over] >= 0.0, 1.0, -1.0)
        out[over] = sign * (threshold + knee * np.tanh((ax[over] - threshold) / knee))
    return out.astype(np.float32)


def _check_rate(rate: int | float, name: str) -> None:
    if not np.isfinite(rate) or rate <= 0:
        raise ValidationError(f"{name} must be a positive number, got {rate!r}")


def resample(
    samples: np.ndarray,
    source_rate: int,
    target_rate: int,
    method: str = "linear",
) -> np.ndarray:
    """Resample a single channel from `source_rate` to `target_rate`.

    `linear` interpolates between neighbouring samples and yields
    `floor(n / (source_rate / target_rate))` output samples. `polyphase`
    delegates to scipy's polyphase filter for offline file work. Equal
    rates return the input object itself.
    """
    _check_rate(source_rate, "source_rate")
    _check_rate(target_rate, "target_rate")
    if method not in RESAMPLERS:
        raise ValidationError(f"Unknown resampler '{method}'; expected one of {RESAMPLERS}")
    if source_rate == target_rate:
        return samples

    x = _as_f64(samples)
    if method == "polyphase":
        g = gcd(int(source_rate), int(target_rate))
        return resample_poly(x, int(target_rate) // g, int(source_rate) // g).astype(np.float32)

    ratio = source_rate / target_rate
    out_len = int(np.floor(x.size / ratio))
    if out_len <= 0:
        return np.zeros(0, dtype=np.float32)
    pos = np.arange(out_len, dtype=np.float64) * ratio
    idx0 = np.floor(pos).astype(np.int64)
    idx1 = np.minimum(idx0 + 1, x.size - 1)
    frac = pos - idx0
    return (x[idx0] * (1.0 - frac) + x[idx1] * frac).astype(np.float32)
