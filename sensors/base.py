"""Abstract base class for waveform sample sources."""

from abc import ABC, abstractmethod

from signal_processing.models import WaveformBuffer


class SensorInterface(ABC):
    """Interface for reading voltage and current samples from a source."""

    @abstractmethod
    def read_buffer(self, n_samples: int) -> WaveformBuffer:
        """Read a batch of samples.

        Args:
            n_samples: Number of samples to read.

        Returns:
            WaveformBuffer with voltage and current channels.
        """
        pass

    @property
    @abstractmethod
    def sampling_rate(self) -> float:
        """Return the sampling rate in Hz."""
        pass
