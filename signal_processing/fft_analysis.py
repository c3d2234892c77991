"""FFT-based harmonic analysis of captured buffers.

Uses numpy FFT to compute a one-sided spectrum and extract the peak
amplitudes of harmonic orders 1..N, the fundamental phase shift between
current and voltage, and the fundamental frequency.

We apply a Hann window to reduce spectral leakage.
"""

from __future__ import annotations

import numpy as np

from config import HARMONIC_ORDERS, SAMPLING_RATE
from signal_processing.models import InvalidInputError


def _hann_window(n: int) -> np.ndarray:
    """Hann window."""
    if n < 2:
        return np.ones(n)
    return 0.5 - 0.5 * np.cos(2.0 * np.pi * np.arange(n) / (n - 1))


def _windowed_rfft(x: np.ndarray, fs: float) -> tuple[np.ndarray, np.ndarray, float]:
    x = np.asarray(x, dtype=float)
    if x.size < 2:
        raise InvalidInputError("Need at least two samples for a spectrum.")
    window = _hann_window(x.size)
    X = np.fft.rfft(x * window)
    freqs = np.fft.rfftfreq(x.size, d=1.0 / fs)
    # For Hann window, coherent gain is mean(window).
    cg = float(np.mean(window))
    return freqs, X, cg


def compute_spectrum(x: np.ndarray, fs: float = SAMPLING_RATE) -> tuple[np.ndarray, np.ndarray]:
    """Compute one-sided amplitude spectrum using rFFT.

    Returns:
        freqs: Frequency axis (Hz)
        amps: One-sided amplitude spectrum (same units as x)
    """
    freqs, X, cg = _windowed_rfft(x, fs)
    n = np.asarray(x).size
    amps = (2.0 / (n * cg)) * np.abs(X)
    amps[0] = amps[0] / 2.0  # DC component not doubled
    return freqs, amps


def _nearest_bin(freqs: np.ndarray, target_hz: float) -> int:
    """Index of the frequency bin closest to target_hz."""
    return int(np.argmin(np.abs(np.asarray(freqs) - float(target_hz))))


def harmonic_amplitudes(
    x: np.ndarray,
    fs: float,
    fundamental_hz: float,
    orders: int = HARMONIC_ORDERS,
) -> np.ndarray:
    """Peak amplitudes of harmonic orders 1..orders (index 0 = fundamental).

    Orders above the Nyquist frequency are reported as 0.
    """
    freqs, amps = compute_spectrum(x, fs)
    out = np.zeros(orders)
    nyquist = fs / 2.0
    for k in range(1, orders + 1):
        target = k * fundamental_hz
        if target > nyquist:
            break
        out[k - 1] = amps[_nearest_bin(freqs, target)]
    return out


def fundamental_phase_shift(
    v: np.ndarray,
    i: np.ndarray,
    fs: float,
    fundamental_hz: float,
) -> float:
    """Phase of the current fundamental relative to the voltage fundamental (rad).

    Positive when the current leads. Result is wrapped into (-pi, pi].
    """
    freqs, XV, _ = _windowed_rfft(v, fs)
    _, XI, _ = _windowed_rfft(i, fs)
    k = _nearest_bin(freqs, fundamental_hz)
    return float(np.angle(XI[k] * np.conj(XV[k])))


def estimate_frequency(x: np.ndarray, fs: float) -> float:
    """Estimate fundamental frequency using FFT peak.

    Args:
        x: Input signal (1D array)
        fs: Sampling rate (Hz)

    Returns:
        Estimated frequency (Hz)
    """
    freqs, X, _ = _windowed_rfft(x, fs)
    X = np.abs(X)

    # Ignore DC component
    X[0] = 0

    idx = int(np.argmax(X))

    # Parabolic interpolation for better accuracy
    # If peak is at boundaries, just return it
    if idx == 0 or idx == len(X) - 1:
        return float(freqs[idx])

    # Parabolic peak shift: d = 0.5 * (alpha - gamma) / (alpha - 2*beta + gamma)
    alpha, beta, gamma = X[idx - 1], X[idx], X[idx + 1]
    denom = alpha - 2 * beta + gamma
    if denom == 0:
        return float(freqs[idx])

    d = 0.5 * (alpha - gamma) / denom
    bin_width = freqs[1] - freqs[0]
    return float(freqs[idx] + d * bin_width)
