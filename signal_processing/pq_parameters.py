"""Power quality parameter calculations."""

from __future__ import annotations

import numpy as np

from config import THD_MAX_PLAUSIBLE
from signal_processing.models import InvalidInputError, Reading, ReadingStatus


def rms(x: np.ndarray) -> float:
    """RMS value: sqrt(mean(x^2))."""
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        raise InvalidInputError("Cannot compute RMS of an empty sequence.")
    return float(np.sqrt(np.mean(x ** 2)))


def thd_reading(
    amplitudes: np.ndarray,
    min_fundamental: float,
    max_plausible: float = THD_MAX_PLAUSIBLE,
) -> Reading:
    """THD (%) of a harmonic amplitude vector, tagged with its reliability.

    THD = sqrt(sum(H2..HN ^ 2)) / H1 * 100

    A fundamental below `min_fundamental` gives UNDEFINED (the ratio would be
    dominated by noise). A result above `max_plausible` gives UNRELIABLE.
    Both carry the value 0.
    """
    a = np.asarray(amplitudes, dtype=float)
    if a.size == 0:
        raise InvalidInputError("Harmonic amplitude vector must not be empty.")
    h1 = float(a[0])
    if h1 < min_fundamental or h1 <= 0.0:
        return Reading(0.0, ReadingStatus.UNDEFINED)
    thd = float(np.sqrt(np.sum(a[1:] ** 2)) / h1 * 100.0)
    if thd > max_plausible:
        return Reading(0.0, ReadingStatus.UNRELIABLE)
    return Reading(thd)


def thd_percent(amplitudes: np.ndarray, min_fundamental: float) -> float:
    """THD (%) with 0 standing in for weak-fundamental or implausible results."""
    return thd_reading(amplitudes, min_fundamental).value


def crest_factor(x: np.ndarray) -> float:
    """Crest factor = peak / RMS."""
    x = np.asarray(x, dtype=float)
    r = rms(x)
    if r <= 1e-12:
        return 0.0
    return float(np.max(np.abs(x)) / r)
