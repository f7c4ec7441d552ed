"""Samples of a single ECG lead and annotated QRS zones."""

from collections.abc import Sequence

import numpy as np

from .constants import QRS_ZONE_TYPE_UNKNOWN, RECORDED_TWELVE_LEADS, SIMULTANEOUS_TOLERANCE
from .dsp.base import FilterProtocol
from .lead_math import INT16_MAX, INT16_MIN, to_sample_array
from .types import LeadType, SampleArray


class QRSZone:
    """Onset, fiducial point and offset of one beat inside the median buffer.

    Attributes:
        type: Beat classification, 0xFFFF when unknown.
        start: Sample number of the QRS onset.
        fiducial: Sample number of the fiducial point.
        end: Sample number of the QRS offset.
    """

    def __init__(self, type: int = QRS_ZONE_TYPE_UNKNOWN, start: int = 0, fiducial: int = 0, end: int = 0):
        self.type = type
        self.start = start
        self.fiducial = fiducial
        self.end = end

    def clone(self) -> "QRSZone":
        return QRSZone(self.type, self.start, self.fiducial, self.end)

    def __eq__(self, other) -> bool:
        if not isinstance(other, QRSZone):
            return NotImplemented
        return (self.type, self.start, self.fiducial, self.end) == (other.type, other.start, other.fiducial, other.end)

    def __repr__(self) -> str:
        return f"QRSZone(type={self.type}, start={self.start}, fiducial={self.fiducial}, end={self.end})"


class Signal:
    """Rhythm and median samples of one lead.

    ``rhythm_start`` and ``rhythm_end`` are absolute sample numbers of the
    recording, ``rhythm`` holds ``rhythm_end - rhythm_start`` samples. The
    median (representative beat) has no position of its own.

    Args:
        type: Lead identity.
        rhythm_start: Sample number of the first rhythm sample.
        rhythm_end: Sample number after the last rhythm sample.
        rhythm: Rhythm samples, converted to an int16 array.
        median: Median beat samples, converted to an int16 array.
    """

    def __init__(
        self,
        type: LeadType = LeadType.Unknown,
        rhythm_start: int = 0,
        rhythm_end: int = 0,
        rhythm: Sequence[int] | SampleArray | None = None,
        median: Sequence[int] | SampleArray | None = None,
    ):
        self.type = LeadType(type)
        self.rhythm_start = rhythm_start
        self.rhythm_end = rhythm_end
        self.rhythm: SampleArray | None = to_sample_array(rhythm)
        self.median: SampleArray | None = to_sample_array(median)

    def __repr__(self) -> str:
        return (
            f"Signal(type={self.type.name}, rhythm_start={self.rhythm_start}, rhythm_end={self.rhythm_end}, "
            f"rhythm={None if self.rhythm is None else len(self.rhythm)} samples, "
            f"median={None if self.median is None else len(self.median)} samples)"
        )

    def clone(self) -> "Signal":
        """Return a deep copy of this lead."""
        return Signal(
            self.type,
            self.rhythm_start,
            self.rhythm_end,
            None if self.rhythm is None else self.rhythm.copy(),
            None if self.median is None else self.median.copy(),
        )

    def apply_filter(
        self,
        rhythm_filter: FilterProtocol | None,
        median_filter: FilterProtocol | None,
    ) -> "Signal | None":
        """Return a filtered copy of this lead.

        Before a stream is filtered, its filter is primed by passing the first
        sample through ``compute`` twice. Absent or empty streams are copied
        without touching their filter.

        Args:
            rhythm_filter: Filter for the rhythm samples.
            median_filter: Filter for the median samples.

        Returns:
            Filtered copy, or ``None`` when a present stream has no filter.
        """
        sig = Signal(self.type, self.rhythm_start, self.rhythm_end)

        if self.rhythm is not None:
            if rhythm_filter is None:
                return None
            sig.rhythm = _filter_stream(self.rhythm, rhythm_filter)

        if self.median is not None:
            if median_filter is None:
                return None
            sig.median = _filter_stream(self.median, median_filter)

        return sig

    @staticmethod
    def is_normal(leads: Sequence["Signal | None"] | None) -> bool:
        """Check whether the first eight leads are I, II, V1 - V6."""
        if leads is None or len(leads) < len(RECORDED_TWELVE_LEADS):
            return False
        for lead, expected in zip(leads, RECORDED_TWELVE_LEADS):
            if lead is None or lead.type != expected:
                return False
        return True

    @staticmethod
    def nr_simultaneously(
        leads: Sequence["Signal | None"] | None,
        tolerance: int = SIMULTANEOUS_TOLERANCE,
    ) -> int:
        """Count the leading leads recorded simultaneously with the first lead.

        A lead is simultaneous when both its rhythm bounds are within
        ``tolerance`` samples of those of the first lead. Counting stops at the
        first lead that is not.

        Returns:
            Number of simultaneous leads, 0 for fewer than two leads or when a
            lead slot is empty.
        """
        if leads is None or len(leads) <= 1 or leads[0] is None:
            return 0

        first = leads[0]
        nr = 1
        while nr < len(leads):
            lead = leads[nr]
            if lead is None:
                return 0
            if (
                abs(first.rhythm_start - lead.rhythm_start) > tolerance
                or abs(first.rhythm_end - lead.rhythm_end) > tolerance
            ):
                break
            nr += 1
        return nr

    @staticmethod
    def sort_on_type(leads: list["Signal | None"] | None, first: int = 0, last: int | None = None) -> None:
        """Sort ``leads[first:last + 1]`` in place on lead type (stable), empty slots last."""
        if leads is None:
            return
        if last is None:
            last = len(leads) - 1
        if first >= last:
            return
        leads[first : last + 1] = sorted(
            leads[first : last + 1], key=lambda lead: (lead is None, LeadType.Unknown if lead is None else lead.type)
        )


def _filter_stream(samples: SampleArray, filt: FilterProtocol) -> SampleArray:
    if len(samples) == 0:
        return samples.copy()

    filt.compute(float(samples[0]))
    filt.compute(float(samples[0]))

    filtered = np.rint(filt.process(samples))
    return np.clip(filtered, INT16_MIN, INT16_MAX).astype(np.int16)
