"""Test zero-crossing period extraction."""

import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import pytest

from signal_processing.models import InvalidInputError, WaveformBuffer
from signal_processing.period_extraction import (
    estimate_frequency_from_crossings,
    extract_display_window,
    extract_periods,
    find_rising_zero_crossings,
)

SPP = 60          # samples per period (50 Hz at 3000 Hz)
FS = 3000.0


def _buffer(n_samples: int, v_phase: float, i_phase_offset: float = 0.0, amplitude: float = 325.0) -> WaveformBuffer:
    k = np.arange(n_samples)
    v = amplitude * np.sin(2 * np.pi * k / SPP + v_phase)
    i = 5.0 * np.sin(2 * np.pi * k / SPP + v_phase + i_phase_offset)
    return WaveformBuffer(v, i, FS)


def test_rising_crossings():
    x = np.array([-1.0, 1.0, 2.0, -0.5, 0.0, 0.3, -2.0, 1.0])
    assert find_rising_zero_crossings(x).tolist() == [1, 5, 7]
    assert find_rising_zero_crossings(np.array([1.0])).size == 0


def test_two_periods_from_random_phase():
    rng = np.random.default_rng(7)
    for _ in range(20):
        phase = rng.uniform(0.2, 2 * np.pi)
        buf = _buffer(3 * SPP, phase)
        win = extract_periods(buf, 50.0, num_periods=2)
        assert win is not None
        assert len(win) == 2 * SPP + 1
        assert len(win.current) == len(win.voltage)
        assert win.samples_per_period == SPP
        # First sample just past the rising edge
        assert 0.0 < win.voltage[0] <= 325.0 * np.sin(2 * np.pi / SPP) + 1e-9
        assert win.voltage[1] > 0.0
        assert win.sampling_rate == pytest.approx(SPP * 50.0)


def test_fallback_to_fewer_periods():
    # One full cycle plus a small margin, first crossing at index 3
    buf = _buffer(66, 2 * np.pi - 0.3)
    assert extract_periods(buf, 50.0, num_periods=2) is None
    win = extract_periods(buf, 50.0, num_periods=1)
    assert win is not None
    assert win.start_index == 3
    assert len(win) == SPP + 1


def test_no_crossings_is_unavailable():
    buf = WaveformBuffer(np.full(100, 5.0), np.zeros(100), FS)
    assert extract_periods(buf, 50.0, 1) is None
    # Single crossing
    buf = _buffer(40, 2 * np.pi - 0.3)
    assert extract_periods(buf, 50.0, 1) is None


def test_invalid_period_count():
    with pytest.raises(InvalidInputError):
        extract_periods(_buffer(200, 0.0), 50.0, num_periods=0)


def test_current_keeps_phase_relation():
    offset = 0.7
    buf = _buffer(3 * SPP, 1.3, i_phase_offset=offset)
    win = extract_periods(buf, 50.0, num_periods=2)
    assert win is not None
    k = win.start_index
    expected = 5.0 * np.sin(2 * np.pi * k / SPP + 1.3 + offset)
    assert abs(win.current[0]) > 0.5
    assert win.current[0] == pytest.approx(expected)
    assert np.array_equal(win.current, buf.current[k:k + len(win)])


def test_inferred_sampling_rate_tracks_drift():
    # Signal at 49 Hz sampled at 3000 Hz: 61 samples per period after rounding
    k = np.arange(300)
    v = np.sin(2 * np.pi * 49.0 * k / FS + 0.4)
    buf = WaveformBuffer(v, v, FS)
    win = extract_periods(buf, 50.0, 1)
    assert win is not None
    assert win.sampling_rate == win.samples_per_period * 50.0
    assert win.samples_per_period in (61, 62)


def test_debounce_spurious_crossing():
    buf = _buffer(3 * SPP, 1.0)
    v = np.array(buf.voltage)
    c0 = int(find_rising_zero_crossings(v)[0])
    # Noise dip right after the first crossing
    v[c0 + 1] = -0.5
    noisy = WaveformBuffer(v, buf.current, FS)

    assert find_rising_zero_crossings(v)[1] == c0 + 2
    assert extract_periods(noisy, 50.0, 1).samples_per_period == 2

    win = extract_periods(noisy, 50.0, 1, min_crossing_distance=SPP // 2)
    assert win is not None
    assert win.samples_per_period == SPP


def test_display_window_fallbacks():
    buf = _buffer(66, 2 * np.pi - 0.3)
    win = extract_display_window(buf, 50.0, num_periods=2)
    assert win.trimmed
    assert win.num_periods == 1

    flat = WaveformBuffer(np.ones(50), np.ones(50), FS)
    win = extract_display_window(flat, 50.0, num_periods=2)
    assert not win.trimmed
    assert len(win) == 50
    assert win.sampling_rate == FS


def test_time_axis():
    win = extract_periods(_buffer(3 * SPP, 1.0), 50.0, 1)
    t = win.time_axis()
    assert t[0] == 0.0
    assert t[-1] == pytest.approx(1 / 50.0)


def test_frequency_from_crossings():
    k = np.arange(600)
    v = np.sin(2 * np.pi * 50.0 * k / FS + 0.2)
    assert estimate_frequency_from_crossings(v, FS) == pytest.approx(50.0)
    # Out of plausible range
    v = np.sin(2 * np.pi * 100.0 * k / FS + 0.2)
    assert estimate_frequency_from_crossings(v, FS) is None
    assert estimate_frequency_from_crossings(np.ones(10), FS) is None


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
