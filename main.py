"""Measurement driver.

- Generate one measurement per tick for the active scenario
- Trim its waveform to a display window of whole periods
- Evaluate PN-EN 50160 compliance
- Log a per-tick summary and a batch summary at the end

Run:
    python main.py --ticks 20 --interval 0
"""

from __future__ import annotations

import argparse
import logging
import time

import numpy as np

from config import DEFAULT_DISPLAY_PERIODS, LOG_LEVEL, PUBLISH_INTERVAL, SCENARIO_ROTATION_TICKS
from data.measurement_table import measurements_to_frame
from signal_processing.compliance import evaluate_measurement
from signal_processing.measurement import generate_measurement
from signal_processing.period_extraction import extract_display_window
from signal_processing.scenarios import rotate_scenario

logger = logging.getLogger("main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated power-quality measurement driver.")
    parser.add_argument("--ticks", type=int, default=30, help="number of measurements to generate")
    parser.add_argument("--interval", type=float, default=PUBLISH_INTERVAL, help="seconds between ticks")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--periods", type=int, default=DEFAULT_DISPLAY_PERIODS, help="periods per display window")
    parser.add_argument("--rotate-every", type=int, default=SCENARIO_ROTATION_TICKS, help="ticks per scenario")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser.parse_args(argv)


def run(
    ticks: int,
    interval: float = PUBLISH_INTERVAL,
    seed: int | None = None,
    periods: int = DEFAULT_DISPLAY_PERIODS,
    rotate_every: int = SCENARIO_ROTATION_TICKS,
) -> list:
    """Run the driver loop and return the generated measurements."""
    rng = np.random.default_rng(seed)
    measurements, labels = [], []

    for tick in range(ticks):
        scenario = rotate_scenario(tick, rotate_every)
        if tick % rotate_every == 0:
            logger.info("Scenario: %s", scenario.name)

        # First rising crossing can land up to one cycle in
        m = generate_measurement(scenario, rng, cycles=periods + 2)
        window = extract_display_window(m.waveform, m.frequency, periods)
        report = evaluate_measurement(m)

        logger.info(
            "[%d] %s | window=%d samples (%d period(s)) | %s",
            tick + 1, m, len(window), window.num_periods, report.status_message,
        )
        measurements.append(m)
        labels.append(scenario.name)

        if interval > 0 and tick + 1 < ticks:
            time.sleep(interval)

    if measurements:
        df = measurements_to_frame(measurements, labels)
        logger.info("Summary by scenario:\n%s", df.groupby("Scenario").mean().round(2).to_string())
    return measurements


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    run(args.ticks, args.interval, args.seed, args.periods, args.rotate_every)


if __name__ == "__main__":
    main()
