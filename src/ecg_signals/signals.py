"""Canonical in-memory representation of the signals of one ECG.

Format readers populate a ``Signals`` object, format writers and viewers read it.
Besides holding the leads, this module provides the transformations shared by all
formats:

- Trimming of padding and fixing leads to a specific length
- Resampling and changing the amplitude multiplier
- Classification and canonicalization into 12- and 15-lead layouts
- Butterworth filtering with state that can persist across windows
"""

from collections.abc import Callable, Hashable, Iterator, Sequence
from typing import TYPE_CHECKING, Literal

import numpy as np
import pandas as pd

from ._logging import logger
from .config import Settings
from .constants import (
    FIFTEEN_LEAD_EXTENSIONS,
    FIFTEEN_LEAD_LAYOUTS,
    MAX_NR_LEADS,
    TWELVE_LEAD_LAYOUT,
)
from .dsp import (
    BandpassFilterButterworth,
    FilterProtocol,
    FilterState,
    HighpassFilterButterworth,
    LowpassFilterButterworth,
)
from .lead_math import calculate_leads, change_multiplier, rescale_position, resample_lead
from .lead_sets import FIFTEEN_LEAD_SHAPES, TWELVE_LEAD_SHAPES, LeadSetShape, match_shape
from .signal import QRSZone, Signal

if TYPE_CHECKING:
    from .buffered import BufferedSignals

_INT32_MAX = 2**31 - 1
_INT32_MIN = -(2**31)


class Signals:
    """Ordered leads of one ECG with their rhythm and median metadata.

    All leads share one rhythm sample rate and AVM, and one median sample rate
    and AVM. The number of leads is fixed once set; lead slots are filled by
    assignment.

    Args:
        nr_leads: Number of (empty) lead slots to allocate.
        settings: Settings used for lead classification and filter defaults.

    Attributes:
        rhythm_avm: Amplitude multiplier of the rhythm samples in uV.
        rhythm_samples_per_second: Sample rate of the rhythm samples.
        median_avm: Amplitude multiplier of the median samples in uV.
        median_length: Length of the median beat in ms.
        median_samples_per_second: Sample rate of the median samples.
        median_fiducial_point: Sample number of the fiducial point in the median.
        qrs_zone: Annotated beats, ``None`` when there are none.

    Examples:
        signals = Signals(2)
        signals.rhythm_avm = 2.5
        signals.rhythm_samples_per_second = 500
        signals[0] = Signal(LeadType.I, 0, 5000, lead_i)
        signals[1] = Signal(LeadType.II, 0, 5000, lead_ii)
    """

    def __init__(self, nr_leads: int = 0, settings: Settings | None = None):
        self.settings = settings or Settings()

        self.rhythm_avm: float = 0.0
        self.rhythm_samples_per_second: int = 0

        self.median_avm: float = 0.0
        self.median_length: int = 0
        self.median_samples_per_second: int = 0

        self.median_fiducial_point: int = 0
        self.qrs_zone: list[QRSZone] | None = None

        self._leads: list[Signal | None] = []
        self.nr_leads = nr_leads

    @property
    def nr_leads(self) -> int:
        """Number of lead slots; setting it allocates new, empty slots."""
        return len(self._leads)

    @nr_leads.setter
    def nr_leads(self, value: int) -> None:
        if value < 0 or value > MAX_NR_LEADS:
            logger.warning(f"Ignoring invalid number of leads: {value}")
            return
        self._leads = [None] * value

    def get_leads(self) -> list[Signal | None]:
        return self._leads

    def set_leads(self, leads: Sequence[Signal | None]) -> None:
        if len(leads) > MAX_NR_LEADS:
            logger.warning(f"Ignoring {len(leads)} leads, at most {MAX_NR_LEADS} are supported")
            return
        self._leads = list(leads)

    def __getitem__(self, index: int) -> Signal | None:
        return self._leads[index] if 0 <= index < len(self._leads) else None

    def __setitem__(self, index: int, lead: Signal | None) -> None:
        self._leads[index] = lead

    def __len__(self) -> int:
        return len(self._leads)

    def __iter__(self) -> Iterator[Signal | None]:
        return iter(self._leads)

    def __repr__(self) -> str:
        types = [lead.type.name if lead is not None else None for lead in self._leads]
        return (
            f"{type(self).__name__}(leads={types}, rhythm={self.rhythm_samples_per_second} Hz, "
            f"median={self.median_samples_per_second} Hz)"
        )

    @property
    def is_buffered(self) -> bool:
        """Whether the leads are windows of a larger recording."""
        return False

    @property
    def as_buffered_signals(self) -> "BufferedSignals | None":
        """This object as ``BufferedSignals`` when it is buffered, otherwise ``None``."""
        return None

    def _copy_metadata(self, target: "Signals") -> None:
        target.rhythm_avm = self.rhythm_avm
        target.rhythm_samples_per_second = self.rhythm_samples_per_second

        target.median_avm = self.median_avm
        target.median_length = self.median_length
        target.median_samples_per_second = self.median_samples_per_second
        target.median_fiducial_point = self.median_fiducial_point

        target.qrs_zone = None if self.qrs_zone is None else [zone.clone() for zone in self.qrs_zone]

    def clone(self) -> "Signals":
        """Return a deep copy, including leads and QRS zones."""
        sigs = Signals(settings=self.settings)
        self._copy_metadata(sigs)
        sigs.set_leads([None if lead is None else lead.clone() for lead in self._leads])
        return sigs

    def is_normal(self) -> bool:
        """Check whether the first eight leads are I, II, V1 - V6."""
        return Signal.is_normal(self._leads)

    def nr_simultaneously(self) -> int:
        """Number of leading leads recorded simultaneously with the first lead."""
        return Signal.nr_simultaneously(self._leads, self.settings.leads.simultaneous_tolerance)

    def sort_on_type(self, first: int = 0, last: int | None = None) -> None:
        """Sort (a range of) the leads in place on lead type."""
        Signal.sort_on_type(self._leads, first, last)

    def calculate_start_and_end(self) -> tuple[int, int]:
        """Return the extent of the rhythm over all leads.

        Returns:
            Tuple of the smallest ``rhythm_start`` and the largest ``rhythm_end``.
            Without leads this is ``(2**31 - 1, -2**31)``.
        """
        start = _INT32_MAX
        end = _INT32_MIN
        for lead in self._leads:
            if lead is None:
                continue
            start = min(start, lead.rhythm_start)
            end = max(end, lead.rhythm_end)
        return start, end

    def trim_signals(self, value: int, start: int | None = None, end: int | None = None) -> None:
        """Strip runs of ``value`` from the beginning and end of the rhythm, in place.

        Only leads that start at ``start`` have their beginning trimmed and only
        leads that end at ``end`` have their end trimmed. A trim is applied only
        when it removes at least one second of samples; shorter runs are kept.

        Args:
            value: Padding value to strip.
            start: Start of all signals, defaults to the calculated extent.
            end: End of all signals, defaults to the calculated extent.
        """
        if start is None or end is None:
            extent_start, extent_end = self.calculate_start_and_end()
            start = extent_start if start is None else start
            end = extent_end if end is None else end

        rate = self.rhythm_samples_per_second

        for sig in self._leads:
            if sig is None or sig.rhythm is None:
                continue

            n = len(sig.rhythm)
            trim_begin = 0
            trim_end = n - 1

            if sig.rhythm_start == start:
                content = np.flatnonzero(sig.rhythm != value)
                if content.size:
                    trim_begin = int(content[0])

            if sig.rhythm_end == end:
                # sample 0 never counts as content when searching from the end
                content = np.flatnonzero(sig.rhythm[1:] != value)
                if content.size:
                    trim_end = int(content[-1]) + 1

            if trim_begin // rate < 1:
                trim_begin = 0

            if (n - 1 - trim_end) // rate < 1:
                trim_end = n - 1

            if trim_begin != 0 or trim_end != n - 1:
                logger.debug(
                    f"Trimming lead {sig.type.name}: {trim_begin} samples at start, {n - 1 - trim_end} at end"
                )
                sig.rhythm_start += trim_begin
                sig.rhythm_end -= (n - 1) - trim_end
                sig.rhythm = sig.rhythm[trim_begin : trim_end + 1].copy()

    def make_specific_length(self, seconds: int, start_point: int = 0) -> None:
        """Give every lead a rhythm of exactly ``seconds`` seconds, in place.

        The new rhythm begins ``start_point`` seconds after the start of the
        extent of all leads. Samples outside a lead's original rhythm are zero.
        Afterwards every lead spans ``[0, seconds * rhythm_samples_per_second)``.

        Args:
            seconds: Length of the rhythm in seconds.
            start_point: Offset in seconds from the start of the signals.
        """
        length = seconds * self.rhythm_samples_per_second
        offset = start_point * self.rhythm_samples_per_second
        start, _ = self.calculate_start_and_end()

        positions = np.arange(length, dtype=np.int64) + start + offset

        for sig in self._leads:
            if sig is None:
                continue
            new_rhythm = np.zeros(length, dtype=np.int16)
            if sig.rhythm is not None:
                inside = (positions >= sig.rhythm_start) & (positions < sig.rhythm_end)
                source = positions[inside] - sig.rhythm_start
                inside[inside] = source < len(sig.rhythm)
                new_rhythm[inside] = sig.rhythm[positions[inside] - sig.rhythm_start]
            sig.rhythm = new_rhythm
            sig.rhythm_start = 0
            sig.rhythm_end = length

    def resample(self, samples_per_second: int) -> "Signals":
        """Return a copy resampled to ``samples_per_second``.

        Only streams with a known sample rate and a nonzero AVM are resampled and
        only their sample-rate fields are updated. Rhythm bounds, QRS zones and the
        median fiducial point are rescaled proportionally.

        Args:
            samples_per_second: Sample rate to resample to.

        Returns:
            The resampled copy.

        Raises:
            ValueError: If ``samples_per_second`` is not positive and a stream
                has to be resampled.
        """
        sigs = self.clone()

        rhythm_rate = self.rhythm_samples_per_second
        median_rate = self.median_samples_per_second
        resample_rhythm = rhythm_rate != 0 and self.rhythm_avm != 0
        resample_median = median_rate != 0 and self.median_avm != 0

        logger.info(
            f"Resampling {self.nr_leads} leads to {samples_per_second} Hz "
            f"(rhythm {rhythm_rate} Hz, median {median_rate} Hz)"
        )

        for sig in sigs:
            if sig is None:
                continue
            if resample_rhythm and sig.rhythm is not None:
                new_start = rescale_position(sig.rhythm_start, samples_per_second, rhythm_rate)
                new_end = rescale_position(sig.rhythm_end, samples_per_second, rhythm_rate)
                sig.rhythm = resample_lead(sig.rhythm, rhythm_rate, samples_per_second, new_end - new_start)
                sig.rhythm_start = new_start
                sig.rhythm_end = new_end

            if resample_median and sig.median is not None:
                sig.median = resample_lead(sig.median, median_rate, samples_per_second)

        if sigs.qrs_zone is not None and median_rate != 0:
            for zone in sigs.qrs_zone:
                zone.start = rescale_position(zone.start, samples_per_second, median_rate)
                zone.fiducial = rescale_position(zone.fiducial, samples_per_second, median_rate)
                zone.end = rescale_position(zone.end, samples_per_second, median_rate)

        if resample_rhythm:
            sigs.rhythm_samples_per_second = samples_per_second

        if resample_median:
            sigs.median_fiducial_point = rescale_position(self.median_fiducial_point, samples_per_second, median_rate)
            sigs.median_samples_per_second = samples_per_second

        return sigs

    def set_avm(self, avm: float) -> None:
        """Rescale the stored samples to another amplitude multiplier, in place.

        Rhythm and median are rescaled independently and only when their current
        AVM is set. An ``avm`` of zero is ignored.

        Args:
            avm: Preferred amplitude multiplier in uV.
        """
        if avm == 0.0:
            return

        for sig in self._leads:
            if sig is None:
                continue
            change_multiplier(sig.rhythm, self.rhythm_avm, avm)
            change_multiplier(sig.median, self.median_avm, avm)

        if self.rhythm_avm != 0.0:
            self.rhythm_avm = avm

        if self.median_avm != 0.0:
            self.median_avm = avm

    def is_twelve_leads(self) -> bool:
        """Determine whether this is a 12-lead ECG in canonical order.

        A recording of 15 simultaneous leads counts as well when its first twelve
        leads are in canonical order. The comparison of the three extra leads
        starts at index ``len(TWELVE_LEAD_LAYOUT)`` of the three-lead extension,
        so the extra leads themselves are never compared.
        """
        nr_sim = self.nr_simultaneously()

        if nr_sim != self.nr_leads:
            return False

        types = [lead.type for lead in self._leads]

        if nr_sim == len(TWELVE_LEAD_LAYOUT):
            return tuple(types) == TWELVE_LEAD_LAYOUT

        if nr_sim == len(FIFTEEN_LEAD_LAYOUTS[0]):
            if tuple(types[: len(TWELVE_LEAD_LAYOUT)]) != TWELVE_LEAD_LAYOUT:
                return False
            for extension in FIFTEEN_LEAD_EXTENSIONS:
                if all(
                    types[len(TWELVE_LEAD_LAYOUT) + i] == extension[i]
                    for i in range(len(TWELVE_LEAD_LAYOUT), len(extension))
                ):
                    return True

        return False

    def is_fifteen_leads(self) -> bool:
        """Determine whether this is a 15-lead ECG in one of the canonical orders."""
        nr_sim = self.nr_simultaneously()

        if nr_sim != self.nr_leads:
            return False

        return tuple(lead.type for lead in self._leads) in FIFTEEN_LEAD_LAYOUTS

    def calculate_twelve_leads(self) -> "Signals | None":
        """Canonicalize into the 12-lead layout.

        Returns:
            This object when it already is in canonical order, a reordered copy
            when the same leads are stored in another order, a copy with derived
            limb leads when a recognized subset was recorded, or ``None`` when
            the leads cannot be canonicalized.
        """
        return self._canonicalize(TWELVE_LEAD_SHAPES)

    def calculate_fifteen_leads(self) -> "Signals | None":
        """Canonicalize into one of the 15-lead layouts.

        Returns:
            See ``calculate_twelve_leads``.
        """
        return self._canonicalize(FIFTEEN_LEAD_SHAPES)

    def _canonicalize(self, shapes: Sequence[LeadSetShape]) -> "Signals | None":
        nr_sim = self.nr_simultaneously()

        if nr_sim == 0 or nr_sim != self.nr_leads:
            logger.debug(f"Cannot canonicalize: {nr_sim} of {self.nr_leads} leads are simultaneous")
            return None

        types = [lead.type for lead in self._leads]
        shape = match_shape(types, shapes)

        if shape is None:
            logger.debug(f"No recognized lead set: {[t.name for t in types]}")
            return None

        if tuple(types) == shape.layout:
            return self

        by_type = {lead.type: lead for lead in self._leads}
        derived = self._derive_leads(shape, by_type) if shape.derived else {}

        if derived is None:
            return None

        leads = [by_type[t].clone() if t in by_type else derived[t] for t in shape.layout]

        sigs = Signals(settings=self.settings)
        self._copy_metadata(sigs)
        sigs.set_leads(leads)

        logger.info(f"Canonicalized {shape.name} into {len(shape.layout)} leads")
        return sigs

    def _derive_leads(self, shape: LeadSetShape, by_type: dict) -> dict | None:
        lead_i = by_type[shape.layout[0]]
        lead_ii = by_type[shape.layout[1]]
        lead_iii = by_type[shape.layout[2]] if shape.uses_lead_iii else None

        if lead_i.rhythm is None or lead_ii.rhythm is None:
            logger.debug("Cannot derive limb leads without rhythm of leads I and II")
            return None

        rhythm = calculate_leads(
            lead_i.rhythm,
            lead_ii.rhythm,
            len(lead_i.rhythm),
            None if lead_iii is None else lead_iii.rhythm,
        )
        if rhythm is None:
            return None

        median = None
        if lead_i.median is not None:
            median = calculate_leads(
                lead_i.median,
                lead_ii.median,
                len(lead_i.median),
                None if lead_iii is None else lead_iii.median,
            )

        logger.debug(f"Derived leads {[t.name for t in shape.derived]} for {shape.name}")

        return {
            lead_type: Signal(
                lead_type,
                lead_i.rhythm_start,
                lead_i.rhythm_end,
                rhythm[lead_type],
                None if median is None else median[lead_type],
            )
            for lead_type in shape.derived
        }

    def apply_bandpass_filter(
        self,
        bottom_freq: float | None = None,
        top_freq: float | None = None,
        num_sections: int | None = None,
        state: FilterState | None = None,
    ) -> "Signals | None":
        """Return a band-pass filtered copy.

        Args:
            bottom_freq: Lower edge of the pass band in Hz, defaults to settings.
            top_freq: Upper edge of the pass band in Hz, defaults to settings.
            num_sections: Second-order sections per stage, defaults to settings.
            state: Filters to reuse. Pass the same object for consecutive windows
                of one recording to continue the filter history.

        Returns:
            The filtered copy or ``None`` when a lead stream cannot be filtered
            because its sample rate is unknown.
        """
        filters = self.settings.filters
        bottom_freq = filters.bandpass_low if bottom_freq is None else bottom_freq
        top_freq = filters.bandpass_high if top_freq is None else top_freq
        num_sections = filters.num_sections if num_sections is None else num_sections

        return self._apply_filter(
            ("bandpass", bottom_freq, top_freq, num_sections),
            lambda rate: BandpassFilterButterworth(bottom_freq, top_freq, num_sections, rate),
            state,
        )

    def apply_lowpass_filter(
        self,
        cutoff_freq: float | None = None,
        num_sections: int | None = None,
        state: FilterState | None = None,
    ) -> "Signals | None":
        """Return a low-pass filtered copy. See ``apply_bandpass_filter``."""
        filters = self.settings.filters
        cutoff_freq = filters.lowpass_cutoff if cutoff_freq is None else cutoff_freq
        num_sections = filters.num_sections if num_sections is None else num_sections

        return self._apply_filter(
            ("lowpass", cutoff_freq, num_sections),
            lambda rate: LowpassFilterButterworth(cutoff_freq, num_sections, rate),
            state,
        )

    def apply_highpass_filter(
        self,
        cutoff_freq: float | None = None,
        num_sections: int | None = None,
        state: FilterState | None = None,
    ) -> "Signals | None":
        """Return a high-pass filtered copy. See ``apply_bandpass_filter``."""
        filters = self.settings.filters
        cutoff_freq = filters.highpass_cutoff if cutoff_freq is None else cutoff_freq
        num_sections = filters.num_sections if num_sections is None else num_sections

        return self._apply_filter(
            ("highpass", cutoff_freq, num_sections),
            lambda rate: HighpassFilterButterworth(cutoff_freq, num_sections, rate),
            state,
        )

    def _apply_filter(
        self,
        kind: Hashable,
        factory: Callable[[int], FilterProtocol],
        state: FilterState | None,
    ) -> "Signals | None":
        if state is None:
            state = FilterState()

        rhythm_rate = self.rhythm_samples_per_second
        median_rate = self.median_samples_per_second

        state.prepare(
            (kind, rhythm_rate, median_rate),
            self.nr_leads,
            lambda: factory(rhythm_rate) if rhythm_rate > 0 else None,
            lambda: factory(median_rate) if median_rate > 0 else None,
        )

        sigs = Signals(self.nr_leads, settings=self.settings)
        self._copy_metadata(sigs)

        for i, lead in enumerate(self._leads):
            if lead is None:
                continue
            filtered = lead.apply_filter(state.rhythm_filters[i], state.median_filters[i])
            if filtered is None:
                logger.warning(f"Cannot filter lead {lead.type.name}: sample rate of a stream is unknown")
                return None
            sigs[i] = filtered

        return sigs

    def to_dataframe(self, stream: Literal["rhythm", "median"] = "rhythm") -> pd.DataFrame:
        """Tabulate the samples with one column per lead.

        Args:
            stream: ``"rhythm"`` for the rhythm indexed by absolute sample number
                over the extent of all leads, ``"median"`` for the median beats
                indexed from 0.

        Returns:
            DataFrame with lead names as columns, ``NaN`` where a lead has no
            sample.

        Raises:
            ValueError: If ``stream`` is unknown.
        """
        leads = [lead for lead in self._leads if lead is not None]
        columns = [lead.type.name for lead in leads]

        if stream == "rhythm":
            start, end = self.calculate_start_and_end()
            if not leads or end <= start:
                return pd.DataFrame(columns=columns, index=pd.RangeIndex(0, name="sample"))
            data = np.full((end - start, len(leads)), np.nan)
            for col, lead in enumerate(leads):
                if lead.rhythm is None:
                    continue
                offset = lead.rhythm_start - start
                n = min(len(lead.rhythm), lead.rhythm_end - lead.rhythm_start)
                data[offset : offset + n, col] = lead.rhythm[:n]
            index = pd.RangeIndex(start, end, name="sample")
        elif stream == "median":
            length = max((len(lead.median) for lead in leads if lead.median is not None), default=0)
            data = np.full((length, len(leads)), np.nan)
            for col, lead in enumerate(leads):
                if lead.median is not None:
                    data[: len(lead.median), col] = lead.median
            index = pd.RangeIndex(0, length, name="sample")
        else:
            raise ValueError(f"Unknown stream '{stream}', expected 'rhythm' or 'median'")

        return pd.DataFrame(data, index=index, columns=columns)
