"""Tabular views of measurement batches.

Flattens Measurement records into rows with the scalar fields, so a batch of
simulated ticks can be summarized with pandas.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from config import SCENARIO_ROTATION_TICKS
from signal_processing.measurement import generate_measurement
from signal_processing.models import Measurement
from signal_processing.scenarios import rotate_scenario


MEASUREMENT_COLUMNS = [
    "v_rms",
    "i_rms",
    "p_act",
    "power_apparent",
    "power_reactive",
    "power_distortion",
    "power_factor",
    "freq",
    "thd_v",
    "thd_i",
]


def measurement_row(m: Measurement) -> dict[str, float]:
    """Scalar fields of one measurement, keyed like the transport payload."""
    payload = m.to_payload()
    return {col: float(payload[col]) for col in MEASUREMENT_COLUMNS}


def measurements_to_frame(
    measurements: list[Measurement],
    labels: list[str] | None = None,
) -> pd.DataFrame:
    """DataFrame with one row per measurement, plus an optional Scenario column."""
    rows = [measurement_row(m) for m in measurements]
    df = pd.DataFrame(rows, columns=MEASUREMENT_COLUMNS)
    if labels is not None:
        if len(labels) != len(measurements):
            raise ValueError("labels must match measurements one to one.")
        df["Scenario"] = labels
    return df


def simulate_measurements(
    n_ticks: int,
    seed: int = 42,
    rotate_every: int = SCENARIO_ROTATION_TICKS,
) -> pd.DataFrame:
    """Run the measurement driver for n_ticks without delays.

    Args:
        n_ticks: Number of measurements to generate.
        seed: Random seed.
        rotate_every: Ticks spent on each scenario before moving on.

    Returns:
        DataFrame with measurement columns + Scenario label.
    """
    if n_ticks < 1:
        raise ValueError("n_ticks must be >= 1.")

    rng = np.random.default_rng(seed)
    measurements, labels = [], []
    for tick in range(n_ticks):
        scenario = rotate_scenario(tick, rotate_every)
        measurements.append(generate_measurement(scenario, rng))
        labels.append(scenario.name)
    return measurements_to_frame(measurements, labels)
