"""Windowed loading of recordings that are too large to keep in memory.

A ``BufferedSignals`` holds one window of the rhythm (and one template) of a
recording and asks its ``BufferedSourceProtocol`` for another window on demand.
Limb leads that the source cannot deliver are derived from leads I and II (and
III) that were loaded earlier in the same call.
"""

from typing import Protocol, runtime_checkable

from ._logging import logger
from .config import Settings
from .lead_math import (
    calculate_lead_avf,
    calculate_lead_avl,
    calculate_lead_avr,
    calculate_lead_iii,
    rescale_position,
    resample_lead,
)
from .signal import QRSZone, Signal
from .signals import Signals
from .types import LeadType, SampleArray


@runtime_checkable
class BufferedSourceProtocol(Protocol):
    """Protocol for format backends that stream a large recording.

    Rhythm positions passed to the source are relative to
    ``BufferedSignals.real_rhythm_start``. A source fills the given ``Signal``
    in place and sets its ``rhythm_start``/``rhythm_end`` in the same relative
    coordinates.
    """

    def load_rhythm_signal(self, lead_nr: int, lead: Signal, avm: float, rhythm_start: int, rhythm_end: int) -> bool:
        """Load ``[rhythm_start, rhythm_end)`` of one lead into ``lead``.

        Returns:
            True if the lead was loaded.
        """
        ...

    def load_template_signal(self, lead_nr: int, lead: Signal, avm: float, template_nr: int) -> bool:
        """Load template ``template_nr`` of one lead into ``lead.median``.

        Returns:
            True if the template was loaded.
        """
        ...

    def load_template_occurance(self, template_nr: int) -> tuple[int, list[QRSZone] | None]:
        """Return how often template ``template_nr`` occurs and its QRS zones."""
        ...


def _derive(
    lead_type: LeadType,
    sig_i: SampleArray,
    sig_ii: SampleArray,
    sig_iii: SampleArray | None,
    length: int,
    avf_length: int | None = None,
) -> tuple[bool, SampleArray | None]:
    """Calculate one limb lead from already resolved leads.

    Returns:
        Tuple of whether ``lead_type`` is derivable and the derived samples.
    """
    if lead_type == LeadType.III:
        return True, calculate_lead_iii(sig_i, sig_ii, length)
    if lead_type == LeadType.aVR:
        return True, calculate_lead_avr(sig_i, sig_ii, length)
    if lead_type == LeadType.aVL:
        if sig_iii is not None:
            return True, calculate_lead_avl(sig_i, sig_iii, length, three_leads=True)
        return True, calculate_lead_avl(sig_i, sig_ii, length, three_leads=False)
    if lead_type == LeadType.aVF:
        if sig_iii is not None:
            return True, calculate_lead_avf(sig_iii, sig_ii, avf_length or length, three_leads=True)
        return True, calculate_lead_avf(sig_i, sig_ii, length, three_leads=False)
    return False, None


class BufferedSignals(Signals):
    """``Signals`` whose leads are a window of a recording held by a source.

    ``load_signal`` and ``load_template`` replace the arrays and bounds of the
    held ``Signal`` objects in place. Clone before loading another window when
    the current one has to be kept.

    Args:
        source: Backend delivering the samples. Shared, never copied.
        nr_leads: Number of (empty) lead slots to allocate.
        settings: Settings, ``settings.buffer`` controls ``init``.

    Attributes:
        real_rhythm_samples_per_second: Sample rate of the recording itself.
        real_rhythm_start: First sample number of the recording.
        real_rhythm_end: Sample number after the last sample of the recording.
        template_nr_median: Number of templates in the recording.
        template_median_samples_per_second: Sample rate of the stored templates.
        template_occurance: Occurrence count of the last loaded template.

    Examples:
        sigs = BufferedSignals(source, 12)
        ...  # set lead types, rates and the real extent
        sigs.init()
        sigs.load_signal(5000, 10000)
    """

    def __init__(
        self,
        source: BufferedSourceProtocol | None,
        nr_leads: int = 0,
        settings: Settings | None = None,
    ):
        super().__init__(nr_leads, settings)
        self._source = source

        self.real_rhythm_samples_per_second: int = 0
        self.real_rhythm_start: int = 0
        self.real_rhythm_end: int = 0

        self.template_nr_median: int = 0
        self.template_median_samples_per_second: int = 0
        self.template_occurance: int = 0

    @property
    def source(self) -> BufferedSourceProtocol | None:
        return self._source

    @property
    def is_buffered(self) -> bool:
        return self._source is not None

    @property
    def as_buffered_signals(self) -> "BufferedSignals | None":
        return self if self._source is not None else None

    def clone(self) -> "BufferedSignals":
        """Return a deep copy of the window that shares the source."""
        sigs = BufferedSignals(self._source, settings=self.settings)

        sigs.real_rhythm_samples_per_second = self.real_rhythm_samples_per_second
        sigs.real_rhythm_start = self.real_rhythm_start
        sigs.real_rhythm_end = self.real_rhythm_end
        sigs.template_nr_median = self.template_nr_median
        sigs.template_median_samples_per_second = self.template_median_samples_per_second
        sigs.template_occurance = self.template_occurance

        self._copy_metadata(sigs)
        sigs.set_leads([None if lead is None else lead.clone() for lead in self])
        return sigs

    def init(self) -> bool:
        """Load the first seconds of the recording, if enabled in the settings.

        Returns:
            Result of ``load_signal``, or True when loading on init is disabled.
        """
        buffer = self.settings.buffer
        if not buffer.load_signal_on_init:
            return True
        return self.load_signal(
            self.real_rhythm_start,
            buffer.nr_secs_loaded_on_init * self.real_rhythm_samples_per_second,
        )

    def load_signal(self, rhythm_start: int, rhythm_end: int) -> bool:
        """Load the rhythm window ``[rhythm_start, rhythm_end)`` of every lead.

        Leads are loaded in ascending order. A lead the source cannot deliver is
        derived when it is a limb lead and leads I and II were loaded before it.
        Loaded windows are resampled when the recording's sample rate differs
        from ``rhythm_samples_per_second``.

        Leads loaded before a failing lead keep their new window.

        Args:
            rhythm_start: Absolute sample number of the start of the window.
            rhythm_end: Absolute sample number after the end of the window.

        Returns:
            True if every lead was loaded or derived.
        """
        if (
            self._source is None
            or self.real_rhythm_samples_per_second <= 0
            or self.real_rhythm_start < 0
            or self.real_rhythm_end < 0
            or self.real_rhythm_start >= self.real_rhythm_end
            or rhythm_start < 0
            or rhythm_end < 0
            or rhythm_start >= rhythm_end
        ):
            logger.debug(f"Cannot load rhythm window [{rhythm_start}, {rhythm_end})")
            return False

        real_rate = self.real_rhythm_samples_per_second
        rate = self.rhythm_samples_per_second

        sig_i = sig_ii = sig_iii = None

        for lead_nr, lead in enumerate(self):
            if lead is None:
                logger.warning(f"Lead slot {lead_nr} is empty")
                return False

            loaded = self._source.load_rhythm_signal(
                lead_nr,
                lead,
                self.rhythm_avm,
                rhythm_start - self.real_rhythm_start,
                rhythm_end - self.real_rhythm_start,
            )

            if loaded:
                lead.rhythm_start += self.real_rhythm_start
                lead.rhythm_end += self.real_rhythm_start

                if rate > 0 and real_rate != rate:
                    new_start = rescale_position(lead.rhythm_start, rate, real_rate)
                    new_end = rescale_position(lead.rhythm_end, rate, real_rate)
                    lead.rhythm = resample_lead(lead.rhythm, real_rate, rate, new_end - new_start)
                    lead.rhythm_start = new_start
                    lead.rhythm_end = new_end

                if lead.type == LeadType.I:
                    sig_i = lead
                elif lead.type == LeadType.II:
                    sig_ii = lead
                elif lead.type == LeadType.III:
                    sig_iii = lead
                continue

            if sig_i is None or sig_ii is None or sig_i.rhythm is None:
                logger.warning(f"Failed to load lead {lead.type.name} and leads I and II are not available")
                return False

            window = rhythm_end - rhythm_start
            if rate > 0 and real_rate != rate:
                window = rescale_position(rhythm_end, rate, real_rate) - rescale_position(rhythm_start, rate, real_rate)
            length = min(len(sig_i.rhythm), window)
            derivable, rhythm = _derive(
                lead.type,
                sig_i.rhythm,
                sig_ii.rhythm,
                None if sig_iii is None else sig_iii.rhythm,
                length,
            )
            if not derivable:
                logger.warning(f"Failed to load lead {lead.type.name}, which cannot be derived")
                return False

            logger.debug(f"Derived lead {lead.type.name} for window [{rhythm_start}, {rhythm_end})")
            lead.rhythm = rhythm
            lead.rhythm_start = sig_i.rhythm_start
            lead.rhythm_end = sig_i.rhythm_start + length

        return True

    def load_template(self, template_nr: int) -> bool:
        """Load template ``template_nr`` of every lead into the medians.

        Uses the same load-or-derive strategy as ``load_signal`` and afterwards
        loads the occurrence count and QRS zones of the template. On failure
        ``template_occurance`` is reset to 0.

        Args:
            template_nr: Number of the template, ``0 < template_nr < template_nr_median``.

        Returns:
            True if every lead was loaded or derived.
        """
        if (
            self._source is None
            or self.template_median_samples_per_second <= 0
            or self.template_nr_median <= 0
            or template_nr <= 0
            or template_nr >= self.template_nr_median
        ):
            logger.debug(f"Cannot load template {template_nr} of {self.template_nr_median}")
            self.template_occurance = 0
            return False

        template_rate = self.template_median_samples_per_second
        rate = self.median_samples_per_second

        sig_i = sig_ii = sig_iii = None

        for lead_nr, lead in enumerate(self):
            if lead is None:
                logger.warning(f"Lead slot {lead_nr} is empty")
                self.template_occurance = 0
                return False

            loaded = self._source.load_template_signal(lead_nr, lead, self.median_avm, template_nr)

            if loaded:
                if rate > 0 and template_rate != rate:
                    lead.median = resample_lead(lead.median, template_rate, rate)

                if lead.type == LeadType.I:
                    sig_i = lead
                elif lead.type == LeadType.II:
                    sig_ii = lead
                elif lead.type == LeadType.III:
                    sig_iii = lead
                continue

            if sig_i is None or sig_ii is None or sig_i.median is None or sig_ii.median is None:
                logger.warning(f"Failed to load template of lead {lead.type.name} and leads I and II are not available")
                self.template_occurance = 0
                return False

            derivable, median = _derive(
                lead.type,
                sig_i.median,
                sig_ii.median,
                None if sig_iii is None else sig_iii.median,
                len(sig_i.median),
                avf_length=len(sig_ii.median),
            )
            if not derivable:
                logger.warning(f"Failed to load template of lead {lead.type.name}, which cannot be derived")
                self.template_occurance = 0
                return False

            lead.median = median

        self.template_occurance, self.qrs_zone = self._source.load_template_occurance(template_nr)
        return True
