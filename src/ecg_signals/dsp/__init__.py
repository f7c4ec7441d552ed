"""Digital filters applied to ECG leads."""

from .base import BaseFilter, FilterProtocol
from .butterworth import BandpassFilterButterworth, HighpassFilterButterworth, LowpassFilterButterworth
from .state import FilterState

__all__ = [
    "BaseFilter",
    "FilterProtocol",
    "FilterState",
    "BandpassFilterButterworth",
    "HighpassFilterButterworth",
    "LowpassFilterButterworth",
]
