"""Butterworth low-pass, high-pass and band-pass filters.

Each filter is built from ``num_sections`` second-order sections, giving a
Butterworth design of order ``2 * num_sections``. The coefficients come from
``scipy.signal.butter`` (bilinear transform with pre-warping) and the filter
history of every section is kept between calls, so a filter can process a
recording window by window or sample by sample.
"""

import numpy as np
import numpy.typing as npt
from scipy import signal

from .._logging import logger
from .base import BaseFilter


class _ButterworthSections(BaseFilter):
    """Cascade of second-order Butterworth sections with persistent state."""

    btype: str = ""

    def __init__(self, cutoff_frequency_hz: float, num_sections: int, samples_per_second: float):
        if num_sections < 1:
            raise ValueError(f"Number of sections must be at least 1, got {num_sections}")
        if samples_per_second <= 0:
            raise ValueError(f"Sampling frequency must be positive, got {samples_per_second}")

        self.cutoff_frequency_hz = cutoff_frequency_hz
        self.num_sections = num_sections
        self.samples_per_second = samples_per_second

        self._sos = signal.butter(
            2 * num_sections,
            cutoff_frequency_hz,
            btype=self.btype,
            fs=samples_per_second,
            output="sos",
        )
        self._zi = np.zeros((self._sos.shape[0], 2))
        logger.debug(
            f"Designed {self.btype}-pass Butterworth filter: {cutoff_frequency_hz} Hz, "
            f"{num_sections} sections at {samples_per_second} Hz"
        )

    def compute(self, sample: float) -> float:
        output, self._zi = signal.sosfilt(self._sos, [sample], zi=self._zi)
        return float(output[0])

    def process(self, samples: npt.ArrayLike) -> npt.NDArray[np.float64]:
        data = np.asarray(samples, dtype=np.float64)
        if data.size == 0:
            return data
        output, self._zi = signal.sosfilt(self._sos, data, zi=self._zi)
        return output

    def reset(self) -> None:
        self._zi = np.zeros_like(self._zi)


class LowpassFilterButterworth(_ButterworthSections):
    """Butterworth low-pass filter.

    Args:
        cutoff_frequency_hz: Cutoff frequency in Hz, below Nyquist.
        num_sections: Number of second-order sections.
        samples_per_second: Sampling frequency of the filtered signal in Hz.

    Examples:
        lowpass = LowpassFilterButterworth(40.0, 2, 500)
        smoothed = lowpass.process(samples)
    """

    btype = "low"


class HighpassFilterButterworth(_ButterworthSections):
    """Butterworth high-pass filter, used to remove baseline wander.

    Args:
        cutoff_frequency_hz: Cutoff frequency in Hz, above zero and below Nyquist.
        num_sections: Number of second-order sections.
        samples_per_second: Sampling frequency of the filtered signal in Hz.
    """

    btype = "high"


class BandpassFilterButterworth(BaseFilter):
    """Butterworth band-pass filter as a cascade of a low-pass and a high-pass.

    The low-pass (top frequency) is applied first, the high-pass (bottom
    frequency) second.

    Args:
        bottom_frequency_hz: Lower edge of the pass band in Hz.
        top_frequency_hz: Upper edge of the pass band in Hz.
        num_sections: Number of second-order sections of each stage.
        samples_per_second: Sampling frequency of the filtered signal in Hz.
    """

    def __init__(
        self,
        bottom_frequency_hz: float,
        top_frequency_hz: float,
        num_sections: int,
        samples_per_second: float,
    ):
        self.lowpass_filter = LowpassFilterButterworth(top_frequency_hz, num_sections, samples_per_second)
        self.highpass_filter = HighpassFilterButterworth(bottom_frequency_hz, num_sections, samples_per_second)

    def compute(self, sample: float) -> float:
        return self.highpass_filter.compute(self.lowpass_filter.compute(sample))

    def process(self, samples: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return self.highpass_filter.process(self.lowpass_filter.process(samples))

    def reset(self) -> None:
        self.lowpass_filter.reset()
        self.highpass_filter.reset()
