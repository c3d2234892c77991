"""Zero-crossing period extraction.

Trims an arbitrary-phase buffer to an exact number of periods starting at a
rising zero crossing of the voltage channel, so successive oscilloscope-style
renders line up. The current channel is sliced with the very same index
window: re-aligning it on its own crossings would erase the phase relation
between the two channels.

A window that cannot be extracted is an expected condition at buffer edges.
It is reported as None and the caller falls back (fewer periods, then the
untrimmed buffer).
"""

from __future__ import annotations

import logging

import numpy as np

from config import (
    DEFAULT_DISPLAY_PERIODS,
    FREQUENCY_MAX_PLAUSIBLE,
    FREQUENCY_MIN_PLAUSIBLE,
    SYSTEM_FREQUENCY,
)
from signal_processing.models import InvalidInputError, PeriodWindow, WaveformBuffer

logger = logging.getLogger(__name__)


def find_rising_zero_crossings(samples: np.ndarray, min_distance: int = 0) -> np.ndarray:
    """Indices i where samples[i-1] <= 0 and samples[i] > 0.

    Args:
        samples: Signal to scan.
        min_distance: Debounce distance in samples. A crossing closer than
            this to the previously kept crossing is dropped. 0 disables it.
    """
    x = np.asarray(samples, dtype=float)
    if x.size < 2:
        return np.zeros(0, dtype=int)
    idx = np.flatnonzero((x[:-1] <= 0.0) & (x[1:] > 0.0)) + 1
    if min_distance <= 0 or idx.size < 2:
        return idx

    kept = [int(idx[0])]
    for i in idx[1:]:
        if i - kept[-1] >= min_distance:
            kept.append(int(i))
    return np.asarray(kept, dtype=int)


def extract_periods(
    buffer: WaveformBuffer,
    nominal_frequency: float = SYSTEM_FREQUENCY,
    num_periods: int = 1,
    min_crossing_distance: int = 0,
) -> PeriodWindow | None:
    """Extract exactly `num_periods` periods from the first rising crossing.

    Returns:
        A PeriodWindow of num_periods * samples_per_period + 1 samples (the
        extra sample closes the last period on its own rising edge), or None
        when the buffer holds fewer than two crossings, the period is
        degenerate, or the window runs past the end of the buffer.
    """
    if num_periods < 1:
        raise InvalidInputError("num_periods must be >= 1.")

    crossings = find_rising_zero_crossings(buffer.voltage, min_crossing_distance)
    if crossings.size < 2:
        logger.debug("Period window unavailable: %d rising crossing(s)", crossings.size)
        return None

    samples_per_period = int(crossings[1] - crossings[0])
    if samples_per_period < 2:
        logger.debug("Period window unavailable: degenerate period of %d sample(s)", samples_per_period)
        return None

    start = int(crossings[0])
    total = num_periods * samples_per_period + 1
    if start + total > len(buffer):
        logger.debug(
            "Period window unavailable: need %d samples from index %d, buffer has %d",
            total, start, len(buffer),
        )
        return None

    window = slice(start, start + total)
    return PeriodWindow(
        voltage=buffer.voltage[window],
        current=buffer.current[window],
        start_index=start,
        samples_per_period=samples_per_period,
        num_periods=num_periods,
        # Measured period, so drift between nominal and actual frequency is absorbed
        sampling_rate=float(samples_per_period * nominal_frequency),
    )


def extract_display_window(
    buffer: WaveformBuffer,
    nominal_frequency: float = SYSTEM_FREQUENCY,
    num_periods: int = DEFAULT_DISPLAY_PERIODS,
    min_crossing_distance: int = 0,
) -> PeriodWindow:
    """Best available display window.

    Tries num_periods, then one period fewer at a time down to 1, and finally
    returns the whole buffer untrimmed (trimmed=False).
    """
    for n in range(num_periods, 0, -1):
        win = extract_periods(buffer, nominal_frequency, n, min_crossing_distance)
        if win is not None:
            if n != num_periods:
                logger.debug("Display window reduced from %d to %d period(s)", num_periods, n)
            return win

    logger.debug("Display window falls back to the untrimmed buffer (%d samples)", len(buffer))
    return PeriodWindow(
        voltage=buffer.voltage,
        current=buffer.current,
        start_index=0,
        samples_per_period=0,
        num_periods=0,
        sampling_rate=buffer.sampling_rate,
        trimmed=False,
    )


def estimate_frequency_from_crossings(
    samples: np.ndarray,
    sampling_rate: float,
    min_hz: float = FREQUENCY_MIN_PLAUSIBLE,
    max_hz: float = FREQUENCY_MAX_PLAUSIBLE,
    min_distance: int = 0,
) -> float | None:
    """Frequency from the mean spacing of rising zero crossings.

    Returns None with fewer than two crossings or when the result falls
    outside [min_hz, max_hz].
    """
    crossings = find_rising_zero_crossings(samples, min_distance)
    if crossings.size < 2:
        return None
    avg_samples = float(np.mean(np.diff(crossings)))
    frequency = float(sampling_rate) / avg_samples
    if not (min_hz <= frequency <= max_hz):
        logger.debug("Crossing frequency %.2f Hz outside [%.1f, %.1f]", frequency, min_hz, max_hz)
        return None
    return frequency
