"""Waveform generation utilities.

This module synthesizes discretized voltage/current waveforms from a harmonic
spectrum, emulating what the metering node's ADC would capture:
- sum of harmonics with a common phase shift
- optional DC offset and uniform noise
- optional symmetric clipping (ADC saturation)
- rounding to a fixed decimal precision (quantization)

Harmonic amplitude vectors are built separately. The true amplitudes and the
synthetic noise floor used to pad missing orders are kept apart so analysis
never mixes padding into signal data.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from config import SAMPLING_RATE, SYSTEM_FREQUENCY, HARMONIC_ORDERS
from signal_processing.models import HarmonicSpectrum, InvalidInputError, NoiseFloor


@dataclass(frozen=True)
class SynthesisOptions:
    noise_amplitude: float = 0.0        # peak-to-peak width of uniform noise
    clip_magnitude: float | None = None # clamp to +/- this value
    dc_offset: float = 0.0


def time_axis(samples: int, sampling_rate: float = SAMPLING_RATE, start_time: float = 0.0) -> np.ndarray:
    """Sample instants t_i = start_time + i / sampling_rate."""
    return start_time + np.arange(samples) / float(sampling_rate)


def synthesize_waveform(
    fundamental: float,
    spectrum: HarmonicSpectrum,
    samples: int,
    frequency_hz: float = SYSTEM_FREQUENCY,
    phase_rad: float = 0.0,
    options: SynthesisOptions | None = None,
    decimals: int = 2,
    sampling_rate: float = SAMPLING_RATE,
    start_time: float = 0.0,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Synthesize a waveform from a harmonic spectrum.

    Args:
        fundamental: Peak amplitude of the fundamental.
        spectrum: Coefficients relative to the fundamental (index 0 = H1).
        samples: Number of samples to produce.
        frequency_hz: Fundamental frequency (Hz).
        phase_rad: Phase shift applied to every harmonic term (rad).
        options: Noise, clipping and DC offset settings.
        decimals: Rounding precision (2 for volts, 3 for amps).
        sampling_rate: Device sample rate, independent of frequency_hz.
        start_time: Time of the first sample (s).
        rng: Random generator for noise. Only used when noise is enabled.

    Returns:
        Sample values as a 1-D float array.
    """
    if samples < 1:
        raise InvalidInputError("samples must be >= 1.")
    options = options or SynthesisOptions()

    t = time_axis(samples, sampling_rate, start_time)
    w1 = 2.0 * np.pi * frequency_hz

    x = np.zeros(samples)
    for h, coeff in enumerate(spectrum.coefficients):
        if coeff == 0.0:
            continue
        x += fundamental * coeff * np.sin((h + 1) * w1 * t + phase_rad)

    if options.dc_offset:
        x += options.dc_offset

    if options.noise_amplitude:
        rng = rng if rng is not None else np.random.default_rng()
        x += (rng.random(samples) - 0.5) * options.noise_amplitude

    if options.clip_magnitude is not None:
        x = np.clip(x, -options.clip_magnitude, options.clip_magnitude)

    return np.round(x, decimals)


def signal_amplitudes(fundamental: float, spectrum: HarmonicSpectrum) -> np.ndarray:
    """Peak amplitude of every order the spectrum defines (unrounded)."""
    return fundamental * np.asarray(spectrum.coefficients)


def noise_floor_padding(
    existing_orders: int,
    noise_floor: NoiseFloor | None,
    rng: np.random.Generator | None = None,
    total_orders: int = HARMONIC_ORDERS,
) -> np.ndarray:
    """Residual amplitudes for orders existing_orders+1 .. total.

    Without a noise floor the padding is all zeros, so results stay
    deterministic.
    """
    total = noise_floor.total_orders if noise_floor is not None else total_orders
    missing = max(0, total - existing_orders)
    if noise_floor is None or noise_floor.max_amplitude == 0.0:
        return np.zeros(missing)
    rng = rng if rng is not None else np.random.default_rng()
    return rng.random(missing) * noise_floor.max_amplitude


def display_amplitudes(signal: np.ndarray, padding: np.ndarray, decimals: int) -> tuple[float, ...]:
    """Full-length harmonic vector for reporting (signal followed by padding)."""
    full = np.concatenate([np.asarray(signal, dtype=float), np.asarray(padding, dtype=float)])
    return tuple(float(a) for a in np.round(full, decimals))
