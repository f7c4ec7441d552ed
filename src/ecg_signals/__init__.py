"""ecg-signals: The in-memory signal core of an ECG format conversion toolkit.

This package holds the leads of one ECG with their rhythm and median beat samples,
and provides the transformations format readers, writers and viewers share: trimming,
resampling, 12- and 15-lead canonicalization with limb lead derivation, Butterworth
filtering with persistent filter state, and windowed loading of large recordings.
"""

from ._logging import logger, set_log_file, set_log_level
from .buffered import BufferedSignals, BufferedSourceProtocol
from .config import BufferSettings, ConfigLoader, FilterSettings, LeadSettings, Settings
from .constants import FIFTEEN_LEAD_LAYOUTS, TWELVE_LEAD_LAYOUT
from .dsp import (
    BandpassFilterButterworth,
    FilterProtocol,
    FilterState,
    HighpassFilterButterworth,
    LowpassFilterButterworth,
)
from .lead_sets import FIFTEEN_LEAD_SHAPES, TWELVE_LEAD_SHAPES, LeadSetShape
from .signal import QRSZone, Signal
from .signals import Signals
from .sources import ArrayBufferedSource
from .types import LeadType

__version__ = "1.0.0-alpha.1"
__all__ = [
    "__version__",
    "logger",
    "set_log_level",
    "set_log_file",
    "LeadType",
    "QRSZone",
    "Signal",
    "Signals",
    "BufferedSignals",
    "BufferedSourceProtocol",
    "ArrayBufferedSource",
    "LeadSetShape",
    "TWELVE_LEAD_SHAPES",
    "FIFTEEN_LEAD_SHAPES",
    "TWELVE_LEAD_LAYOUT",
    "FIFTEEN_LEAD_LAYOUTS",
    "FilterProtocol",
    "FilterState",
    "LowpassFilterButterworth",
    "HighpassFilterButterworth",
    "BandpassFilterButterworth",
    "Settings",
    "BufferSettings",
    "FilterSettings",
    "LeadSettings",
    "ConfigLoader",
]


def __dir__():
    return __all__
