import numpy as np
import pytest

from neuromono.core import StereoBuffer
from neuromono.core.analyzer import FrequencyDistribution, StereoAnalyzer, analyze_stereo
from neuromono.core.errors import ValidationError


SR = 44100


def _sine(n: int = 1000, phase: float = 0.0) -> np.ndarray:
    return (np.sin(np.arange(n) * 0.1 + phase) * 0.5).astype(np.float32)


def test_identical_channels_have_no_width() -> None:
    x = _sine()
    a = analyze_stereo(StereoBuffer(left=x, right=x.copy(), sample_rate=SR))
    assert a.width == 0.0
    assert a.phase_correlation > 0.999


def test_inverted_channels_are_wide_and_anticorrelated() -> None:
    x = _sine()
    a = analyze_stereo(StereoBuffer(left=x, right=-x, sample_rate=SR))
    assert a.width > 0.3
    assert a.phase_correlation < -0.999


def test_constant_signal_levels() -> None:
    x = np.full(1000, 0.5, dtype=np.float32)
    a = analyze_stereo(StereoBuffer(left=x, right=x, sample_rate=SR))
    assert abs(a.rms_level - 0.5) < 1e-6
    assert a.peak_level == 0.5
    assert a.frequency_distribution.low == pytest.approx(1.0)


def test_silent_buffer_is_all_zero() -> None:
    z = np.zeros(1000, dtype=np.float32)
    a = analyze_stereo(StereoBuffer(left=z, right=z, sample_rate=SR))
    assert a.width == 0.0
    assert a.richness == 0.0
    assert a.rms_level == 0.0
    assert a.peak_level == 0.0
    assert a.phase_correlation == 0.0
    assert a.frequency_distribution == FrequencyDistribution(0.0, 0.0, 0.0)


def test_one_silent_channel_gives_zero_correlation() -> None:
    a = analyze_stereo(StereoBuffer(left=_sine(), right=np.zeros(1000), sample_rate=SR))
    assert a.phase_correlation == 0.0
    assert a.width > 0.0


def test_frequency_distribution_sums_to_one() -> None:
    rng = np.random.default_rng(0)
    left = rng.uniform(-0.5, 0.5, 5000).astype(np.float32)
    right = rng.uniform(-0.5, 0.5, 5000).astype(np.float32)
    fd = analyze_stereo(StereoBuffer(left=left, right=right, sample_rate=SR)).frequency_distribution
    assert fd.low + fd.mid + fd.high == pytest.approx(1.0, abs=1e-9)
    assert min(fd.low, fd.mid, fd.high) >= 0.0


def test_alternating_signal_lands_in_high_band() -> None:
    x = np.where(np.arange(1000) % 2 == 0, 0.5, -0.5).astype(np.float32)
    fd = analyze_stereo(StereoBuffer(left=x, right=x, sample_rate=SR)).frequency_distribution
    assert fd.high == pytest.approx(1.0)
    assert fd.low == 0.0


def test_noise_is_rich() -> None:
    rng = np.random.default_rng(1)
    left = rng.uniform(-0.5, 0.5, 4096).astype(np.float32)
    right = rng.uniform(-0.5, 0.5, 4096).astype(np.float32)
    a = analyze_stereo(StereoBuffer(left=left, right=right, sample_rate=SR))
    assert a.richness == 1.0


def test_short_buffers_degrade_without_nan() -> None:
    for n in (1, 2, 100, 256, 300):
        x = _sine(n)
        a = analyze_stereo(StereoBuffer(left=x, right=-x, sample_rate=SR))
        values = [a.width, a.richness, a.rms_level, a.peak_level, a.phase_correlation]
        assert all(np.isfinite(v) for v in values)
        assert a.richness == 0.0
    fd = analyze_stereo(StereoBuffer(left=[0.3], right=[0.1], sample_rate=SR)).frequency_distribution
    assert fd == FrequencyDistribution()


def test_analysis_uses_bounded_prefixes() -> None:
    rng = np.random.default_rng(2)
    left = rng.uniform(-0.3, 0.3, 10000).astype(np.float32)
    right = rng.uniform(-0.3, 0.3, 10000).astype(np.float32)
    changed = left.copy()
    changed[8192:] = 0.0

    base = analyze_stereo(StereoBuffer(left=left, right=right, sample_rate=SR))
    tail = analyze_stereo(StereoBuffer(left=changed, right=right, sample_rate=SR))
    assert base.richness == tail.richness
    assert base.frequency_distribution == tail.frequency_distribution
    assert base.width != tail.width


def test_custom_prefix_tunables() -> None:
    x = _sine(2000)
    short = StereoAnalyzer(richness_prefix=256, band_prefix=1)
    a = short.analyze(StereoBuffer(left=x, right=-x, sample_rate=SR))
    assert a.richness == 0.0
    assert a.frequency_distribution == FrequencyDistribution()


def test_feature_vector_order() -> None:
    x = _sine()
    a = analyze_stereo(StereoBuffer(left=x, right=x, sample_rate=SR))
    vec = a.feature_vector()
    assert vec.shape == (8,)
    assert vec[0] == pytest.approx(a.width)
    assert vec[4] == pytest.approx((a.phase_correlation + 1.0) / 2.0)
    assert vec[5] == pytest.approx(a.frequency_distribution.low)


def test_invalid_buffers_are_rejected() -> None:
    with pytest.raises(ValidationError):
        StereoBuffer(left=np.zeros(0), right=np.zeros(0), sample_rate=SR)
    with pytest.raises(ValidationError):
        StereoBuffer(left=np.zeros(10), right=np.zeros(9), sample_rate=SR)
    with pytest.raises(ValidationError):
        StereoBuffer(left=np.zeros(10), right=np.zeros(10), sample_rate=0)
    with pytest.raises(ValidationError):
        StereoAnalyzer().analyze(None)


def test_nan_sample_propagates_into_analysis() -> None:
    left = _sine(1000)
    left[10] = np.nan
    a = analyze_stereo(StereoBuffer(left=left, right=_sine(1000, phase=0.4), sample_rate=SR))
    assert np.isnan(a.width)
    assert np.isnan(a.richness)
    assert np.isnan(a.rms_level)
    fd = a.frequency_distribution
    assert np.isnan(fd.low) and np.isnan(fd.mid) and np.isnan(fd.high)
