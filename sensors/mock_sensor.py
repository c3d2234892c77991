"""Sample sources: synthetic stream and recorded CSV capture."""

import logging

import numpy as np
import pandas as pd

from config import CURRENT_DECIMALS, SAMPLING_RATE, SYSTEM_FREQUENCY, VOLTAGE_DECIMALS
from signal_processing.models import InvalidInputError, WaveformBuffer
from signal_processing.scenarios import Scenario
from signal_processing.waveform_generator import SynthesisOptions, synthesize_waveform
from .base import SensorInterface

logger = logging.getLogger(__name__)


class MockSensor(SensorInterface):
    """Streams phase-continuous synthetic buffers for a scenario.

    The stream starts at a random phase, so buffers look like arbitrary
    captures rather than waveforms aligned to a zero crossing.
    """

    def __init__(
        self,
        scenario: Scenario,
        sampling_rate: float = SAMPLING_RATE,
        frequency_hz: float = SYSTEM_FREQUENCY,
        current_rms: float = 5.0,
        seed: int | None = None,
    ):
        self.scenario = scenario
        self._fs = float(sampling_rate)
        self.frequency_hz = float(frequency_hz)
        self.current_rms = float(current_rms)
        self.rng = np.random.default_rng(seed)
        self.time_counter = float(self.rng.random() / self.frequency_hz)

    @property
    def sampling_rate(self) -> float:
        return self._fs

    def read_buffer(self, n_samples: int) -> WaveformBuffer:
        """Generate the next n_samples of the stream."""
        sc = self.scenario
        v_fund = sc.nominal_voltage * np.sqrt(2.0)
        i_fund = self.current_rms * np.sqrt(2.0)
        phi = float(np.arccos(sc.cos_phi))

        v = synthesize_waveform(
            v_fund,
            sc.voltage_spectrum,
            n_samples,
            self.frequency_hz,
            0.0,
            SynthesisOptions(sc.noise, sc.clip_voltage, sc.dc_offset),
            decimals=VOLTAGE_DECIMALS,
            sampling_rate=self._fs,
            start_time=self.time_counter,
            rng=self.rng,
        )
        i = synthesize_waveform(
            i_fund,
            sc.current_spectrum,
            n_samples,
            self.frequency_hz,
            phi,
            SynthesisOptions(noise_amplitude=sc.noise * 0.001),
            decimals=CURRENT_DECIMALS,
            sampling_rate=self._fs,
            start_time=self.time_counter,
            rng=self.rng,
        )
        self.time_counter += n_samples / self._fs
        return WaveformBuffer(v, i, self._fs)


class FileSensor(SensorInterface):
    """Reads a recorded capture from CSV.

    Expected columns, in order: time (s), voltage (V), current (A). The
    sampling rate is inferred from the time column when possible.
    """

    def __init__(self, file_path: str, sampling_rate: float = SAMPLING_RATE):
        self._fs = float(sampling_rate)
        df = pd.read_csv(file_path)
        if df.shape[1] < 3:
            raise InvalidInputError(
                f"{file_path}: expected time, voltage and current columns, got {df.shape[1]}."
            )
        if df.empty:
            raise InvalidInputError(f"{file_path}: capture holds no samples.")

        self.t = df.iloc[:, 0].to_numpy(dtype=float)
        self.v = df.iloc[:, 1].to_numpy(dtype=float)
        self.i = df.iloc[:, 2].to_numpy(dtype=float)
        self.n_total = len(self.t)
        self.pointer = 0

        if self.n_total > 1:
            dt = float(np.mean(np.diff(self.t)))
            if dt > 0:
                self._fs = 1.0 / dt
        logger.info("Loaded %d samples from %s at %.1f Hz", self.n_total, file_path, self._fs)

    @property
    def sampling_rate(self) -> float:
        return self._fs

    def read_buffer(self, n_samples: int) -> WaveformBuffer:
        """Next n_samples, wrapping around at the end of the capture.

        n_samples == -1 (or anything >= the capture length) returns the whole
        capture.
        """
        if n_samples == -1 or n_samples >= self.n_total:
            return WaveformBuffer(self.v, self.i, self._fs)
        if n_samples < 1:
            raise InvalidInputError("n_samples must be >= 1 or -1.")

        idx = (self.pointer + np.arange(n_samples)) % self.n_total
        self.pointer = int((self.pointer + n_samples) % self.n_total)
        return WaveformBuffer(self.v[idx], self.i[idx], self._fs)
