"""Test the measurement pipeline, scenarios and measurement tables."""

import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import pytest

from data.measurement_table import MEASUREMENT_COLUMNS, measurements_to_frame, simulate_measurements
from signal_processing.measurement import generate_measurement, measure_capture
from signal_processing.models import HarmonicSpectrum, InvalidInputError, ReadingStatus, WaveformBuffer
from signal_processing.period_extraction import extract_periods
from signal_processing.scenarios import SCENARIOS, get_scenario, get_scenario_names, rotate_scenario
from signal_processing.waveform_generator import synthesize_waveform


def test_budeanu_identity_for_every_scenario():
    rng = np.random.default_rng(11)
    for name in get_scenario_names():
        for _ in range(5):
            m = generate_measurement(get_scenario(name), rng)
            s, p, q, d = m.apparent_power, m.active_power, m.reactive_power, m.distortion_power
            lhs = s ** 2
            rhs = p ** 2 + q ** 2 + d ** 2
            tol = 0.03 * lhs + 0.4 * s + 0.01
            print(f"{name}: S={s} P={p} Q={q} D={d}")
            assert abs(lhs - rhs) <= tol, f"{name}: S^2={lhs:.2f}, P^2+Q^2+D^2={rhs:.2f}"


def test_measurement_fields_and_rounding():
    m = generate_measurement(get_scenario("DISTORTED"), np.random.default_rng(2))
    assert m.voltage_rms == round(m.voltage_rms, 1)
    assert m.current_rms == round(m.current_rms, 3)
    assert m.power_factor == round(m.power_factor, 2)
    assert m.thd_voltage == round(m.thd_voltage, 2)
    assert 49.8 <= m.frequency <= 50.2
    assert len(m.harmonics_v) == 25
    assert len(m.harmonics_i) == 25
    assert 226.0 <= m.voltage_rms <= 236.0
    # lambda = P/S equals cos(phi) for the simulated loads
    assert abs(m.power_factor - 0.75) <= 0.01
    # Buffer covers one cycle plus the closing sample
    assert len(m.waveform) == 61


def test_thd_ignores_noise_floor():
    sc = get_scenario("DISTORTED")
    with_floor = generate_measurement(sc, np.random.default_rng(9))
    without_floor = generate_measurement(sc, np.random.default_rng(9), voltage_noise_floor=None, current_noise_floor=None)
    coeffs = np.array(sc.voltage_spectrum.coefficients)
    expected = np.sqrt(np.sum(coeffs[1:] ** 2)) / coeffs[0] * 100
    assert with_floor.thd_voltage == pytest.approx(expected, abs=0.01)
    assert without_floor.thd_voltage == with_floor.thd_voltage
    assert all(a == 0.0 for a in without_floor.harmonics_v[8:])
    assert any(a > 0.0 for a in with_floor.harmonics_v[8:])


def test_low_current_thd_is_undefined():
    m = generate_measurement(get_scenario("LOW_CURRENT"), np.random.default_rng(1))
    # 0.02-0.05 A RMS keeps the current fundamental below 0.15 A peak
    assert 0.0 < m.current_rms < 0.08
    assert m.thd_current == 0.0
    assert m.thd_current_status is ReadingStatus.UNDEFINED
    assert m.thd_voltage_status is ReadingStatus.OK


def test_clipped_scenario_saturates():
    m = generate_measurement(get_scenario("CLIPPED"), np.random.default_rng(5))
    assert np.max(np.abs(m.waveform.voltage)) <= 340.0


def test_multi_cycle_buffer_supports_display_window():
    m = generate_measurement(get_scenario("CLEAN"), np.random.default_rng(6), cycles=4)
    win = extract_periods(m.waveform, m.frequency, num_periods=2)
    assert win is not None
    assert len(win) == 2 * win.samples_per_period + 1


def test_invalid_cycles():
    with pytest.raises(InvalidInputError):
        generate_measurement(get_scenario("CLEAN"), np.random.default_rng(0), cycles=0)


def test_payload_layout():
    m = generate_measurement(get_scenario("CLEAN"), np.random.default_rng(3))
    payload = m.to_payload()
    for key in ("v_rms", "i_rms", "p_act", "power_apparent", "power_reactive", "power_distortion",
                "power_factor", "freq", "freq_valid", "thd_v", "thd_i", "harm_v", "harm_i",
                "waveform_v", "waveform_i"):
        assert key in payload
    assert len(payload["waveform_v"]) == len(payload["waveform_i"])
    assert payload["power_reactive"] >= 0


def test_measure_capture_recovers_signal():
    fs = 3000.0
    n = 600  # ten cycles at 50 Hz
    v = synthesize_waveform(325.0, HarmonicSpectrum((1.0, 0.0, 0.05, 0.0, 0.03)), n, 50.0, 0.0, decimals=2)
    phi = np.arccos(0.8)
    i = synthesize_waveform(7.0, HarmonicSpectrum((1.0, 0.0, 0.2)), n, 50.0, phi, decimals=3)
    m = measure_capture(WaveformBuffer(v, i, fs))

    assert m.frequency == pytest.approx(50.0, abs=0.1)
    assert m.frequency_valid
    assert m.harmonics_v[0] == pytest.approx(325.0, rel=0.01)
    assert m.thd_voltage == pytest.approx(np.sqrt(0.05 ** 2 + 0.03 ** 2) * 100, abs=0.2)
    assert m.thd_current == pytest.approx(20.0, abs=0.5)
    assert m.power_factor == pytest.approx(0.8, abs=0.02)
    assert m.voltage_rms == pytest.approx(325.0 / np.sqrt(2) * np.sqrt(1 + 0.05 ** 2 + 0.03 ** 2), abs=0.5)


def test_scenario_lookup_and_rotation():
    assert get_scenario_names() == list(SCENARIOS.keys())
    with pytest.raises(ValueError):
        get_scenario("NOPE")
    names = get_scenario_names()
    assert rotate_scenario(0, 10) is SCENARIOS[names[0]]
    assert rotate_scenario(10, 10) is SCENARIOS[names[1]]
    assert rotate_scenario(10 * len(names), 10) is SCENARIOS[names[0]]


def test_measurement_tables():
    df = simulate_measurements(12, seed=1, rotate_every=3)
    assert len(df) == 12
    assert list(df.columns) == MEASUREMENT_COLUMNS + ["Scenario"]
    assert df["Scenario"].nunique() == 4

    rng = np.random.default_rng(0)
    ms = [generate_measurement(get_scenario("CLEAN"), rng) for _ in range(3)]
    frame = measurements_to_frame(ms)
    assert frame["v_rms"].tolist() == [m.voltage_rms for m in ms]
    with pytest.raises(ValueError):
        measurements_to_frame(ms, labels=["a"])


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
