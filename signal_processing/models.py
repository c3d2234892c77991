"""Shared data types for the signal core.

All records are immutable: sample arrays are copied on construction and
flagged read-only so a buffer can be handed to several consumers safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from config import HARMONIC_ORDERS, SAMPLING_RATE


class InvalidInputError(ValueError):
    """Raised for malformed inputs (empty or mismatched channels, bad spectra)."""


def _frozen_array(values, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise InvalidInputError(f"{name} must be a 1-D sequence.")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class WaveformBuffer:
    """Equal-length voltage and current samples at a fixed sample rate."""

    voltage: np.ndarray
    current: np.ndarray
    sampling_rate: float = SAMPLING_RATE

    def __post_init__(self) -> None:
        v = _frozen_array(self.voltage, "voltage")
        i = _frozen_array(self.current, "current")
        if v.size == 0:
            raise InvalidInputError("Waveform buffer must not be empty.")
        if v.size != i.size:
            raise InvalidInputError(
                f"Channel length mismatch: voltage={v.size}, current={i.size}."
            )
        if self.sampling_rate <= 0:
            raise InvalidInputError("sampling_rate must be > 0.")
        object.__setattr__(self, "voltage", v)
        object.__setattr__(self, "current", i)
        object.__setattr__(self, "sampling_rate", float(self.sampling_rate))

    def __len__(self) -> int:
        return int(self.voltage.size)


@dataclass(frozen=True)
class HarmonicSpectrum:
    """Per-order coefficients relative to the fundamental (index 0 = H1)."""

    coefficients: tuple[float, ...]

    def __post_init__(self) -> None:
        coeffs = tuple(float(c) for c in self.coefficients)
        if not coeffs:
            raise InvalidInputError("Harmonic spectrum needs at least the fundamental.")
        if any(not np.isfinite(c) or c < 0 for c in coeffs):
            raise InvalidInputError("Harmonic coefficients must be finite and >= 0.")
        object.__setattr__(self, "coefficients", coeffs)

    def __len__(self) -> int:
        return len(self.coefficients)

    def padded(self, orders: int) -> np.ndarray:
        """Coefficients extended with zeros up to `orders` entries."""
        out = np.zeros(max(orders, len(self.coefficients)))
        out[: len(self.coefficients)] = self.coefficients
        return out


@dataclass(frozen=True)
class NoiseFloor:
    """Bounded synthetic residual for harmonic orders the spectrum leaves out."""

    max_amplitude: float
    total_orders: int = HARMONIC_ORDERS

    def __post_init__(self) -> None:
        if self.max_amplitude < 0:
            raise InvalidInputError("max_amplitude must be >= 0.")
        if self.total_orders < 1:
            raise InvalidInputError("total_orders must be >= 1.")


class ReadingStatus(str, Enum):
    OK = "ok"
    UNRELIABLE = "unreliable"   # computed, but outside the plausible range
    UNDEFINED = "undefined"     # inputs too weak to compute a meaningful value


@dataclass(frozen=True)
class Reading:
    """A scalar result tagged with how far it can be trusted.

    `value` holds the conventional sentinel when status is not OK.
    """

    value: float
    status: ReadingStatus = ReadingStatus.OK

    @property
    def ok(self) -> bool:
        return self.status is ReadingStatus.OK


@dataclass(frozen=True, eq=False)
class Measurement:
    voltage_rms: float
    current_rms: float
    active_power: float
    apparent_power: float
    reactive_power: float
    distortion_power: float
    power_factor: float
    frequency: float
    thd_voltage: float
    thd_current: float
    harmonics_v: tuple[float, ...]
    harmonics_i: tuple[float, ...]
    waveform: WaveformBuffer
    frequency_valid: bool = True
    thd_voltage_status: ReadingStatus = ReadingStatus.OK
    thd_current_status: ReadingStatus = ReadingStatus.OK
    power_factor_status: ReadingStatus = ReadingStatus.OK

    def to_payload(self) -> dict:
        """Transport dictionary in the field layout of the metering node."""
        return {
            "v_rms": self.voltage_rms,
            "i_rms": self.current_rms,
            "p_act": self.active_power,
            "power_apparent": self.apparent_power,
            "power_reactive": self.reactive_power,
            "power_distortion": self.distortion_power,
            "power_factor": self.power_factor,
            "freq": self.frequency,
            "freq_valid": self.frequency_valid,
            "thd_v": self.thd_voltage,
            "thd_i": self.thd_current,
            "harm_v": list(self.harmonics_v),
            "harm_i": list(self.harmonics_i),
            "waveform_v": self.waveform.voltage.tolist(),
            "waveform_i": self.waveform.current.tolist(),
        }

    def __str__(self) -> str:
        return (
            f"Measurement(V={self.voltage_rms:.1f}V, I={self.current_rms:.3f}A, "
            f"P={self.active_power:.1f}W, PF={self.power_factor:.2f}, "
            f"f={self.frequency:.1f}Hz, THD_V={self.thd_voltage:.2f}%, "
            f"THD_I={self.thd_current:.2f}%)"
        )


@dataclass(frozen=True, eq=False)
class PeriodWindow:
    """A buffer slice trimmed to whole periods from a rising zero crossing."""

    voltage: np.ndarray
    current: np.ndarray
    start_index: int
    samples_per_period: int
    num_periods: int
    sampling_rate: float
    trimmed: bool = True

    def __len__(self) -> int:
        return int(self.voltage.size)

    def time_axis(self) -> np.ndarray:
        """Sample times (s) relative to the window start."""
        return np.arange(len(self)) / self.sampling_rate
