"""Simulated load scenarios.

Presets for the measurement driver, mirroring conditions seen on the metering
node: clean supply, non-linear loads, ADC clipping, DC offset and very low
currents. A scenario is always passed explicitly to each generation call, so
several independent sources can be simulated side by side.
"""

from __future__ import annotations

from dataclasses import dataclass

from config import NOMINAL_VOLTAGE_RMS
from signal_processing.models import HarmonicSpectrum


@dataclass(frozen=True)
class Scenario:
    name: str
    description: str
    nominal_voltage: float
    voltage_spectrum: HarmonicSpectrum
    current_spectrum: HarmonicSpectrum
    noise: float                    # voltage noise width (V); current uses noise * 0.001
    cos_phi: float
    clip_voltage: float | None = None
    dc_offset: float = 0.0
    low_current: bool = False       # 0.02-0.05 A, phone-charger level


SCENARIOS = {
    "CLEAN": Scenario(
        "Clean Power",
        "Mostly fundamental. Negligible harmonics.",
        NOMINAL_VOLTAGE_RMS,
        HarmonicSpectrum((1.0, 0.01, 0.005, 0.003, 0.002, 0.001, 0.001, 0.001)),
        HarmonicSpectrum((1.0, 0.01, 0.005, 0.003, 0.002, 0.001, 0.001, 0.001)),
        noise=0.5,
        cos_phi=0.95,
    ),
    "DISTORTED": Scenario(
        "Distorted Power (Non-linear Load)",
        "Significant voltage harmonics, heavy current distortion.",
        NOMINAL_VOLTAGE_RMS,
        HarmonicSpectrum((1.0, 0.02, 0.08, 0.04, 0.06, 0.03, 0.02, 0.015)),
        HarmonicSpectrum((1.0, 0.05, 0.15, 0.08, 0.12, 0.06, 0.04, 0.03)),
        noise=1.0,
        cos_phi=0.75,
    ),
    "CLIPPED": Scenario(
        "Voltage Clipping (Overload)",
        "Overvoltage driving the ADC into saturation.",
        248.0,
        HarmonicSpectrum((1.0, 0.03, 0.12, 0.06, 0.08, 0.04, 0.03, 0.02)),
        HarmonicSpectrum((1.0, 0.04, 0.10, 0.05, 0.08, 0.04, 0.03, 0.02)),
        noise=2.0,
        cos_phi=0.85,
        clip_voltage=340.0,
    ),
    "ASYMMETRIC": Scenario(
        "Asymmetric Waveform",
        "DC component shifts the voltage waveform.",
        225.0,
        HarmonicSpectrum((1.0, 0.04, 0.06, 0.08, 0.05, 0.04, 0.02, 0.015)),
        HarmonicSpectrum((1.0, 0.05, 0.08, 0.06, 0.07, 0.04, 0.03, 0.02)),
        noise=1.5,
        cos_phi=0.68,
        dc_offset=5.0,
    ),
    "LOW_CURRENT": Scenario(
        "Very Low Current (Phone Charger)",
        "High relative harmonics but tiny absolute current.",
        NOMINAL_VOLTAGE_RMS,
        HarmonicSpectrum((1.0, 0.015, 0.008, 0.005, 0.003, 0.002, 0.001, 0.001)),
        HarmonicSpectrum((1.0, 0.08, 0.12, 0.06, 0.04, 0.02, 0.01, 0.008)),
        noise=0.8,
        cos_phi=0.65,
        low_current=True,
    ),
}


def get_scenario_names() -> list[str]:
    return list(SCENARIOS.keys())


def get_scenario(name: str) -> Scenario:
    if name not in SCENARIOS:
        raise ValueError(f"Unknown scenario: {name}")
    return SCENARIOS[name]


def rotate_scenario(tick: int, every: int) -> Scenario:
    """Scenario active at `tick` when cycling through presets every `every` ticks."""
    if every < 1:
        raise ValueError("every must be >= 1.")
    names = get_scenario_names()
    return SCENARIOS[names[(tick // every) % len(names)]]
