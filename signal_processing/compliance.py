"""PN-EN 50160 compliance classification.

Measurable indicator groups:
- Group 1: supply voltage magnitude (deviation from the declared 230 V)
- Group 2: supply frequency (deviation from 50 Hz)
- Group 4: voltage waveform distortion (THD)

An indicator whose input is missing is unknown (None), and an unknown
indicator makes the overall verdict unknown as well.
"""

from __future__ import annotations

from dataclasses import dataclass

from config import (
    FREQUENCY_DEVIATION_LIMIT_HZ,
    NOMINAL_VOLTAGE_RMS,
    SYSTEM_FREQUENCY,
    VOLTAGE_DEVIATION_LIMIT_PERCENT,
    VOLTAGE_THD_LIMIT,
)
from signal_processing.models import Measurement, ReadingStatus


@dataclass(frozen=True)
class ComplianceBand:
    nominal: float
    lower: float              # lowest allowed deviation
    upper: float              # highest allowed deviation
    unit: str
    upper_inclusive: bool = True
    relative: bool = False    # deviation in percent of nominal

    def deviation(self, value: float) -> float:
        if self.relative:
            return (value - self.nominal) / self.nominal * 100.0
        return value - self.nominal

    def contains(self, deviation: float) -> bool:
        if deviation < self.lower:
            return False
        if self.upper_inclusive:
            return deviation <= self.upper
        return deviation < self.upper


DEFAULT_LIMITS = {
    "voltage": ComplianceBand(
        NOMINAL_VOLTAGE_RMS, -VOLTAGE_DEVIATION_LIMIT_PERCENT, VOLTAGE_DEVIATION_LIMIT_PERCENT, "%", relative=True
    ),
    "frequency": ComplianceBand(
        SYSTEM_FREQUENCY, -FREQUENCY_DEVIATION_LIMIT_HZ, FREQUENCY_DEVIATION_LIMIT_HZ, "Hz"
    ),
    "thd": ComplianceBand(0.0, 0.0, VOLTAGE_THD_LIMIT, "%", upper_inclusive=False),
}


@dataclass(frozen=True)
class Indicator:
    name: str
    value: float | None
    deviation: float | None
    within_limits: bool | None


@dataclass(frozen=True)
class ComplianceReport:
    indicators: dict[str, Indicator]
    overall_compliant: bool | None
    status_message: str


def _indicator(name: str, value: float | None, band: ComplianceBand) -> Indicator:
    if value is None:
        return Indicator(name, None, None, None)
    dev = band.deviation(value)
    return Indicator(name, value, dev, band.contains(dev))


def all_true_or_none(*flags: bool | None) -> bool | None:
    """AND of the flags; None as soon as one of them is unknown."""
    for flag in flags:
        if flag is None:
            return None
        if not flag:
            return False
    return True


def _status_message(indicators: dict[str, Indicator]) -> str:
    if all(ind.within_limits is True for ind in indicators.values()):
        return "All indicators within PN-EN 50160 limits"

    problems = []
    voltage = indicators["voltage"]
    if voltage.within_limits is False:
        problems.append(f"Voltage deviation {voltage.deviation:.1f}%")
    if indicators["frequency"].within_limits is False:
        problems.append("Frequency out of range")
    thd = indicators["thd"]
    if thd.within_limits is False:
        problems.append(f"THD {thd.value:.1f}%")

    if not problems:
        return "Compliance unknown: missing indicators"
    return "Non-compliant: " + ", ".join(problems)


def evaluate_compliance(
    voltage_rms: float | None = None,
    frequency: float | None = None,
    thd_voltage: float | None = None,
    limits: dict[str, ComplianceBand] = DEFAULT_LIMITS,
) -> ComplianceReport:
    """Classify voltage, frequency and THD against the band table."""
    indicators = {
        "voltage": _indicator("voltage", voltage_rms, limits["voltage"]),
        "frequency": _indicator("frequency", frequency, limits["frequency"]),
        "thd": _indicator("thd", thd_voltage, limits["thd"]),
    }
    overall = all_true_or_none(*(ind.within_limits for ind in indicators.values()))
    return ComplianceReport(indicators, overall, _status_message(indicators))


def evaluate_measurement(
    m: Measurement,
    limits: dict[str, ComplianceBand] = DEFAULT_LIMITS,
) -> ComplianceReport:
    """Compliance of a Measurement.

    An invalid frequency or a THD that is not a genuine reading counts as
    unknown rather than as its sentinel value.
    """
    return evaluate_compliance(
        voltage_rms=m.voltage_rms,
        frequency=m.frequency if m.frequency_valid else None,
        thd_voltage=m.thd_voltage if m.thd_voltage_status is ReadingStatus.OK else None,
        limits=limits,
    )
