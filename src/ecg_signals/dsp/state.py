"""Filter state carried between successive filter calls on windows of one recording."""

from collections.abc import Callable, Hashable

from .._logging import logger
from .base import FilterProtocol

FilterFactory = Callable[[], FilterProtocol | None]


class FilterState:
    """Per-lead filters of one ``Signals`` object, reused across windows.

    Pass the same instance to every ``apply_*_filter`` call made on consecutive
    windows of a recording (for example after each ``BufferedSignals.load_signal``)
    and the IIR history of every lead continues from the previous window.

    The filters are (re)built when the filter kind, its parameters, the sample
    rates or the number of leads change.

    Attributes:
        key: Description of the filters currently held, ``None`` when empty.
        rhythm_filters: One filter per lead for the rhythm samples.
        median_filters: One filter per lead for the median samples.
    """

    def __init__(self):
        self.key: Hashable | None = None
        self.rhythm_filters: list[FilterProtocol | None] = []
        self.median_filters: list[FilterProtocol | None] = []

    def __len__(self) -> int:
        return len(self.rhythm_filters)

    def prepare(
        self,
        key: Hashable,
        nr_leads: int,
        rhythm_factory: FilterFactory,
        median_factory: FilterFactory,
    ) -> None:
        """Make sure one rhythm and one median filter exist per lead.

        Args:
            key: Description of the requested filters. Existing filters are kept
                when it equals the current key and the lead count is unchanged.
            nr_leads: Number of leads that will be filtered.
            rhythm_factory: Creates a rhythm filter, may return ``None`` when the
                rhythm cannot be filtered.
            median_factory: Creates a median filter, may return ``None``.
        """
        if key == self.key and len(self.rhythm_filters) == nr_leads and len(self.median_filters) == nr_leads:
            return

        logger.debug(f"Building filters for {nr_leads} leads: {key}")
        self.key = key
        self.rhythm_filters = [rhythm_factory() for _ in range(nr_leads)]
        self.median_filters = [median_factory() for _ in range(nr_leads)]

    def reset(self) -> None:
        """Clear the history of all held filters, keeping their design."""
        for filt in self.rhythm_filters + self.median_filters:
            if filt is not None and hasattr(filt, "reset"):
                filt.reset()
