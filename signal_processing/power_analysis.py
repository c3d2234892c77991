"""Power decomposition (Budeanu).

Splits apparent power into:
1. Active power P (from the fundamental phase angle).
2. Fundamental reactive power Q1, taken strictly from the fundamental
   phasors. Harmonics add to S without a well-defined reactive component.
3. Distortion power D, the residual sqrt(S^2 - P^2 - Q1^2).

Power factor is lambda = P / S, not cos(phi).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from config import PF_MIN_APPARENT_POWER
from signal_processing.models import Reading, ReadingStatus


@dataclass(frozen=True)
class PowerDecomposition:
    apparent: float      # S (VA)
    active: float        # P (W)
    reactive: float      # Q1 (var), signed
    distortion: float    # D (VA)
    power_factor: float  # lambda
    power_factor_status: ReadingStatus = ReadingStatus.OK


def apparent_power(vrms: float, irms: float) -> float:
    """Apparent power S = Vrms * Irms."""
    return float(vrms * irms)


def power_factor_reading(p: float, s: float, min_apparent: float = PF_MIN_APPARENT_POWER) -> Reading:
    """Power factor P / S; 1.0 tagged UNDEFINED at (near) no load."""
    if s > min_apparent:
        return Reading(float(p / s))
    return Reading(1.0, ReadingStatus.UNDEFINED)


def power_factor(p: float, s: float, min_apparent: float = PF_MIN_APPARENT_POWER) -> float:
    """Power factor P / S, defaulting to 1.0 when S is inside the deadband."""
    return power_factor_reading(p, s, min_apparent).value


def decompose_power(
    vrms: float,
    irms: float,
    v_fund_peak: float,
    i_fund_peak: float,
    phi: float,
    min_apparent: float = PF_MIN_APPARENT_POWER,
) -> PowerDecomposition:
    """Budeanu decomposition from RMS values and fundamental phasors.

    Args:
        vrms, irms: RMS of the full (distorted) waveforms.
        v_fund_peak, i_fund_peak: Peak amplitudes of the fundamentals.
        phi: Fundamental voltage-current phase angle (rad).
    """
    s = apparent_power(vrms, irms)
    p = s * float(np.cos(phi))
    u1 = v_fund_peak / np.sqrt(2.0)
    i1 = i_fund_peak / np.sqrt(2.0)
    q1 = float(u1 * i1 * np.sin(phi))

    # Round-off can push the radicand slightly negative
    d = float(np.sqrt(max(0.0, s * s - p * p - q1 * q1)))

    pf = power_factor_reading(p, s, min_apparent)
    return PowerDecomposition(
        apparent=s,
        active=p,
        reactive=q1,
        distortion=d,
        power_factor=pf.value,
        power_factor_status=pf.status,
    )
