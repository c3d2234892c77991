"""Measurement pipeline.

Two entry points produce a Measurement:
- generate_measurement: one tick of the simulated metering node
  (synthesis -> statistics -> power decomposition).
- measure_capture: a Measurement from an already captured buffer, using
  FFT harmonic analysis instead of a known spectrum.

Both share the same statistics/power path and the same field rounding.
"""

from __future__ import annotations

import logging

import numpy as np

from config import (
    CURRENT_DECIMALS,
    CURRENT_NOISE_FLOOR,
    FREQUENCY_MAX_PLAUSIBLE,
    FREQUENCY_MIN_PLAUSIBLE,
    HARMONIC_ORDERS,
    SAMPLING_RATE,
    SYSTEM_FREQUENCY,
    THD_I_MIN_FUNDAMENTAL,
    THD_V_MIN_FUNDAMENTAL,
    VOLTAGE_DECIMALS,
    VOLTAGE_NOISE_FLOOR,
)
from signal_processing.fft_analysis import estimate_frequency, fundamental_phase_shift, harmonic_amplitudes
from signal_processing.models import InvalidInputError, Measurement, NoiseFloor, WaveformBuffer
from signal_processing.period_extraction import estimate_frequency_from_crossings
from signal_processing.power_analysis import decompose_power
from signal_processing.pq_parameters import rms, thd_reading
from signal_processing.scenarios import Scenario
from signal_processing.waveform_generator import (
    SynthesisOptions,
    display_amplitudes,
    noise_floor_padding,
    signal_amplitudes,
    synthesize_waveform,
)

logger = logging.getLogger(__name__)

DEFAULT_VOLTAGE_NOISE_FLOOR = NoiseFloor(VOLTAGE_NOISE_FLOOR, HARMONIC_ORDERS)
DEFAULT_CURRENT_NOISE_FLOOR = NoiseFloor(CURRENT_NOISE_FLOOR, HARMONIC_ORDERS)


def assemble_measurement(
    buffer: WaveformBuffer,
    frequency: float,
    phi: float,
    harmonics_v: np.ndarray,
    harmonics_i: np.ndarray,
    display_v: tuple[float, ...],
    display_i: tuple[float, ...],
    frequency_valid: bool = True,
    thd_v_min_fundamental: float = THD_V_MIN_FUNDAMENTAL,
    thd_i_min_fundamental: float = THD_I_MIN_FUNDAMENTAL,
) -> Measurement:
    """Compute statistics and power terms, then round to the reported precision.

    Args:
        buffer: Voltage/current samples the RMS values are taken from.
        frequency: Fundamental frequency (Hz).
        phi: Fundamental current phase relative to voltage (rad).
        harmonics_v, harmonics_i: True harmonic peak amplitudes (no padding).
        display_v, display_i: Full-length vectors reported on the Measurement.
    """
    vrms = rms(buffer.voltage)
    irms = rms(buffer.current)
    power = decompose_power(vrms, irms, float(harmonics_v[0]), float(harmonics_i[0]), phi)
    thd_v = thd_reading(harmonics_v, thd_v_min_fundamental)
    thd_i = thd_reading(harmonics_i, thd_i_min_fundamental)

    return Measurement(
        voltage_rms=round(vrms, 1),
        current_rms=round(irms, 3),
        active_power=round(power.active, 1),
        apparent_power=round(power.apparent, 1),
        reactive_power=round(abs(power.reactive), 1),
        distortion_power=round(power.distortion, 1),
        power_factor=round(power.power_factor, 2),
        frequency=round(float(frequency), 1),
        thd_voltage=round(thd_v.value, 2),
        thd_current=round(thd_i.value, 2),
        harmonics_v=display_v,
        harmonics_i=display_i,
        waveform=buffer,
        frequency_valid=frequency_valid,
        thd_voltage_status=thd_v.status,
        thd_current_status=thd_i.status,
        power_factor_status=power.power_factor_status,
    )


def generate_measurement(
    scenario: Scenario,
    rng: np.random.Generator,
    cycles: int = 1,
    sampling_rate: float = SAMPLING_RATE,
    voltage_noise_floor: NoiseFloor | None = DEFAULT_VOLTAGE_NOISE_FLOOR,
    current_noise_floor: NoiseFloor | None = DEFAULT_CURRENT_NOISE_FLOOR,
) -> Measurement:
    """Simulate one measurement cycle for `scenario`.

    The buffer spans `cycles` fundamental periods plus one sample, starting
    at zero phase. Pass None as a noise floor to pad harmonic vectors with
    zeros instead of random residuals.
    """
    if cycles < 1:
        raise InvalidInputError("cycles must be >= 1.")

    frequency = SYSTEM_FREQUENCY + (rng.random() - 0.5) * 0.4  # 49.8 - 50.2 Hz
    samples_per_cycle = int(round(sampling_rate / frequency))
    samples = samples_per_cycle * cycles + 1

    v_rms = scenario.nominal_voltage + (rng.random() - 0.5) * 4.0
    v_fund = v_rms * np.sqrt(2.0)
    if scenario.low_current:
        i_rms = 0.02 + rng.random() * 0.03
    else:
        i_rms = v_rms * (0.01 + rng.random() * 0.05) / scenario.cos_phi
    i_fund = i_rms * np.sqrt(2.0)
    phi = float(np.arccos(scenario.cos_phi))

    v = synthesize_waveform(
        v_fund,
        scenario.voltage_spectrum,
        samples,
        frequency,
        0.0,
        SynthesisOptions(scenario.noise, scenario.clip_voltage, scenario.dc_offset),
        decimals=VOLTAGE_DECIMALS,
        sampling_rate=sampling_rate,
        rng=rng,
    )
    i = synthesize_waveform(
        i_fund,
        scenario.current_spectrum,
        samples,
        frequency,
        phi,
        SynthesisOptions(noise_amplitude=scenario.noise * 0.001),
        decimals=CURRENT_DECIMALS,
        sampling_rate=sampling_rate,
        rng=rng,
    )

    harm_v = signal_amplitudes(v_fund, scenario.voltage_spectrum)
    harm_i = signal_amplitudes(i_fund, scenario.current_spectrum)
    pad_v = noise_floor_padding(harm_v.size, voltage_noise_floor, rng)
    pad_i = noise_floor_padding(harm_i.size, current_noise_floor, rng)

    m = assemble_measurement(
        WaveformBuffer(v, i, sampling_rate),
        frequency,
        phi,
        harm_v,
        harm_i,
        display_amplitudes(harm_v, pad_v, VOLTAGE_DECIMALS),
        display_amplitudes(harm_i, pad_i, CURRENT_DECIMALS),
    )
    logger.debug("Generated %s for scenario %s", m, scenario.name)
    return m


def measure_capture(
    buffer: WaveformBuffer,
    orders: int = HARMONIC_ORDERS,
) -> Measurement:
    """Measurement from a captured buffer.

    Frequency comes from zero crossings of the DC-free voltage, with the FFT
    peak as fallback. Harmonic vectors are reported as measured, without a
    synthetic noise floor.
    """
    fs = buffer.sampling_rate
    v_ac = buffer.voltage - np.mean(buffer.voltage)
    frequency = estimate_frequency_from_crossings(v_ac, fs)
    if frequency is None:
        frequency = estimate_frequency(v_ac, fs)
        logger.warning("Zero-crossing detection failed, using FFT frequency %.2f Hz", frequency)
    frequency_valid = FREQUENCY_MIN_PLAUSIBLE <= frequency <= FREQUENCY_MAX_PLAUSIBLE

    harm_v = harmonic_amplitudes(buffer.voltage, fs, frequency, orders)
    harm_i = harmonic_amplitudes(buffer.current, fs, frequency, orders)
    phi = fundamental_phase_shift(buffer.voltage, buffer.current, fs, frequency)

    return assemble_measurement(
        buffer,
        frequency,
        phi,
        harm_v,
        harm_i,
        display_amplitudes(harm_v, np.zeros(0), VOLTAGE_DECIMALS),
        display_amplitudes(harm_i, np.zeros(0), CURRENT_DECIMALS),
        frequency_valid=frequency_valid,
    )
