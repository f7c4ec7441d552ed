"""Array backed implementation of the buffered source protocol.

``ArrayBufferedSource`` serves windows of a recording that is available as a
2D array (leads x samples). Pass a ``numpy.memmap`` to stream a large binary
file without reading it completely.
"""

from collections.abc import Iterable, Sequence

import numpy as np

from ._logging import logger
from .buffered import BufferedSignals
from .config import Settings
from .lead_math import change_multiplier
from .signal import QRSZone, Signal
from .types import LeadType


class ArrayBufferedSource:
    """Buffered source over rhythm and template arrays.

    Leads are looked up by type, leads of unknown type by their index. Lead
    types in ``missing`` are never delivered, so they have to be derived.

    Args:
        rhythm: Rhythm samples with shape (n_leads, n_samples).
        lead_types: Lead type of every row of ``rhythm``.
        samples_per_second: Sample rate of the rhythm.
        templates: Template samples with shape (n_templates, n_leads, n_samples).
        template_occurances: Occurrence count and QRS zones per template.
        avm: Amplitude multiplier of the stored samples in uV.
        median_samples_per_second: Sample rate of the templates, defaults to
            ``samples_per_second``.
        missing: Lead types the source refuses to load.

    Raises:
        ValueError: If the array shapes do not match ``lead_types``.

    Examples:
        data = np.memmap("recording.bin", dtype=np.int16, mode="r").reshape(12, -1)
        source = ArrayBufferedSource(data, TWELVE_LEAD_LAYOUT, 500, avm=2.5)
        sigs = source.build_signals()
    """

    def __init__(
        self,
        rhythm: np.ndarray,
        lead_types: Sequence[LeadType],
        samples_per_second: int,
        templates: np.ndarray | None = None,
        template_occurances: Sequence[tuple[int, list[QRSZone] | None]] | None = None,
        avm: float = 1.0,
        median_samples_per_second: int | None = None,
        missing: Iterable[LeadType] = (),
    ):
        if rhythm.ndim != 2:
            raise ValueError(f"Rhythm must have shape (n_leads, n_samples), got {rhythm.shape}")
        if rhythm.shape[0] != len(lead_types):
            raise ValueError(f"Rhythm has {rhythm.shape[0]} leads but {len(lead_types)} lead types were given")
        if templates is not None and (templates.ndim != 3 or templates.shape[1] != len(lead_types)):
            raise ValueError(f"Templates must have shape (n_templates, {len(lead_types)}, n_samples), got {templates.shape}")
        if samples_per_second <= 0:
            raise ValueError(f"Sample rate must be positive, got {samples_per_second}")

        self.rhythm = rhythm
        self.lead_types = [LeadType(lead_type) for lead_type in lead_types]
        self.samples_per_second = samples_per_second
        self.templates = templates
        self.template_occurances = template_occurances
        self.avm = avm
        self.median_samples_per_second = median_samples_per_second or samples_per_second
        self.missing = frozenset(missing)

    @property
    def nr_leads(self) -> int:
        return len(self.lead_types)

    @property
    def nr_samples(self) -> int:
        return self.rhythm.shape[1]

    @property
    def nr_templates(self) -> int:
        return 0 if self.templates is None else self.templates.shape[0]

    def _find_lead(self, lead_nr: int, lead: Signal) -> int | None:
        if lead.type in self.missing:
            return None
        if lead.type != LeadType.Unknown:
            try:
                return self.lead_types.index(lead.type)
            except ValueError:
                return None
        return lead_nr if 0 <= lead_nr < self.nr_leads else None

    def _convert(self, samples: np.ndarray, avm: float) -> np.ndarray:
        converted = np.array(samples, dtype=np.int16)
        if avm > 0:
            change_multiplier(converted, self.avm, avm)
        return converted

    def load_rhythm_signal(self, lead_nr: int, lead: Signal, avm: float, rhythm_start: int, rhythm_end: int) -> bool:
        """Copy a window of one lead, clipping its end to the recording."""
        index = self._find_lead(lead_nr, lead)
        if index is None or rhythm_start < 0 or rhythm_start >= self.nr_samples or rhythm_start >= rhythm_end:
            return False

        rhythm_end = min(rhythm_end, self.nr_samples)
        lead.rhythm = self._convert(self.rhythm[index, rhythm_start:rhythm_end], avm)
        lead.rhythm_start = rhythm_start
        lead.rhythm_end = rhythm_end
        return True

    def load_template_signal(self, lead_nr: int, lead: Signal, avm: float, template_nr: int) -> bool:
        index = self._find_lead(lead_nr, lead)
        if index is None or not 0 <= template_nr < self.nr_templates:
            return False

        lead.median = self._convert(self.templates[template_nr, index], avm)
        return True

    def load_template_occurance(self, template_nr: int) -> tuple[int, list[QRSZone] | None]:
        if self.template_occurances is None or not 0 <= template_nr < len(self.template_occurances):
            return 0, None

        occurance, zones = self.template_occurances[template_nr]
        return occurance, None if zones is None else [zone.clone() for zone in zones]

    def build_signals(self, settings: Settings | None = None) -> BufferedSignals:
        """Create an initialized ``BufferedSignals`` describing this recording.

        One lead slot is created per row. Lead types in ``missing`` keep their
        slot and are derived on every load.

        Args:
            settings: Settings of the new object.

        Returns:
            The buffered signals, with the first window loaded when enabled in
            ``settings.buffer``.
        """
        sigs = BufferedSignals(self, self.nr_leads, settings)

        sigs.rhythm_avm = self.avm
        sigs.rhythm_samples_per_second = self.samples_per_second
        sigs.real_rhythm_samples_per_second = self.samples_per_second
        sigs.real_rhythm_start = 0
        sigs.real_rhythm_end = self.nr_samples

        if self.templates is not None:
            sigs.median_avm = self.avm
            sigs.median_samples_per_second = self.median_samples_per_second
            sigs.median_length = (self.templates.shape[2] * 1000) // self.median_samples_per_second
            sigs.template_median_samples_per_second = self.median_samples_per_second
            sigs.template_nr_median = self.nr_templates

        for lead_nr, lead_type in enumerate(self.lead_types):
            sigs[lead_nr] = Signal(lead_type)

        if not sigs.init():
            logger.warning(f"Failed to load the first window of {self.nr_leads} leads")

        return sigs
