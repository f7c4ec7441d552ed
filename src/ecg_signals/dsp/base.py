"""Base classes and protocols for sample-by-sample filters."""

from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt


@runtime_checkable
class FilterProtocol(Protocol):
    """Protocol that all filters applied to ECG leads must implement.

    A filter is stateful: every call continues where the previous call stopped,
    which allows one filter instance to process consecutive windows of the same
    lead as if they were one long signal.
    """

    def compute(self, sample: float) -> float:
        """Filter one sample and return the filtered value."""
        ...

    def process(self, samples: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Filter a sequence of samples, equivalent to calling ``compute`` for each."""
        ...


class BaseFilter:
    """Base class providing ``process`` on top of ``compute``.

    Subclasses must implement ``compute`` and may override ``process`` and
    ``reset`` with a vectorized implementation.
    """

    def compute(self, sample: float) -> float:
        raise NotImplementedError

    def process(self, samples: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return np.array([self.compute(float(s)) for s in np.asarray(samples)], dtype=np.float64)

    def reset(self) -> None:
        """Forget the filter history."""
