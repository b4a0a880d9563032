import numpy as np
import pytest

from neuromono.core.errors import ValidationError
from neuromono.core.signal import hann_window, normalize, peak, resample, rms, soft_clip


def test_rms_constant_and_sine() -> None:
    assert abs(rms(np.full(100, 0.5, dtype=np.float32)) - 0.5) < 1e-6
    sine = np.sin(np.arange(1000) * 0.1).astype(np.float32)
    assert 0.6 < rms(sine) < 0.8
    assert rms(np.zeros(0, dtype=np.float32)) == 0.0


def test_peak_uses_absolute_value() -> None:
    x = np.array([0.1, -0.8, 0.3], dtype=np.float32)
    assert abs(peak(x) - 0.8) < 1e-6


def test_normalize_to_target_rms() -> None:
    x = np.full(100, 0.25, dtype=np.float32)
    out = normalize(x, 0.5)
    assert abs(rms(out) - 0.5) < 1e-4
    assert out.dtype == np.float32


def test_normalize_zero_rms_is_identity() -> None:
    x = np.zeros(100, dtype=np.float32)
    out = normalize(x, 0.5)
    assert np.array_equal(out, x)


def test_normalize_clamps_to_unit_range() -> None:
    x = np.array([0.1, 0.9, -0.9, 0.1], dtype=np.float32)
    out = normalize(x, 2.0)
    assert np.max(np.abs(out)) <= 1.0


def test_soft_clip_passes_values_below_threshold_unchanged() -> None:
    x = np.array([0.5, -0.5, 0.3, -0.3, 0.9, -0.9], dtype=np.float32)
    out = soft_clip(x, 0.9)
    assert np.array_equal(out, x)


def test_soft_clip_compresses_values_above_threshold() -> None:
    out = soft_clip(np.array([1.5, -1.5], dtype=np.float32), 0.9)
    assert abs(out[0]) < 1.5
    assert abs(out[1]) < 1.5
    assert out[0] > 0.9
    assert out[1] < -0.9
    assert np.max(np.abs(out)) <= 1.0


def test_hann_window_shape() -> None:
    out = hann_window(np.ones(100, dtype=np.float32))
    assert abs(out[0]) < 0.01
    assert abs(out[-1]) < 0.01
    assert out[50] > 0.9


def test_hann_window_single_sample_is_finite() -> None:
    out = hann_window(np.array([0.4], dtype=np.float32))
    assert np.all(np.isfinite(out))
    assert out[0] == np.float32(0.4)


def test_resample_lengths() -> None:
    x = np.sin(np.arange(1000) * 0.1).astype(np.float32)
    assert resample(x, 44100, 22050).shape[0] == 500

    ramp = (np.arange(100) / 100).astype(np.float32)
    up = resample(ramp, 22050, 44100)
    assert up.shape[0] == 200
    assert abs(up[1] - 0.005) < 1e-6


def test_resample_same_rate_returns_input() -> None:
    x = np.zeros(100, dtype=np.float32)
    assert resample(x, 44100, 44100) is x


def test_resample_polyphase_option() -> None:
    x = np.sin(np.arange(1000) * 0.1).astype(np.float32)
    out = resample(x, 44100, 22050, method="polyphase")
    assert out.shape[0] == 500
    assert out.dtype == np.float32


def test_resample_rejects_bad_rates_and_methods() -> None:
    x = np.zeros(10, dtype=np.float32)
    with pytest.raises(ValidationError):
        resample(x, 0, 44100)
    with pytest.raises(ValidationError):
        resample(x, 44100, -1)
    with pytest.raises(ValidationError):
        resample(x, 44100, 22050, method="sinc")
