"""Recognized lead-set shapes and how they map onto canonical layouts.

Every shape names the exact set of simultaneously recorded leads it accepts and
the canonical layout it produces. Leads of the layout that were not recorded
are derived from I and II (and III when recorded); recorded leads that are not
part of the layout are dropped.

Examples:
    shape = match_shape([LeadType.I, LeadType.II, LeadType.V1, ...], TWELVE_LEAD_SHAPES)
    shape.derived  # (LeadType.III, LeadType.aVR, LeadType.aVL, LeadType.aVF)
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .constants import (
    DERIVABLE_LEADS,
    FIFTEEN_LEAD_EXTENSIONS,
    FIFTEEN_LEAD_LAYOUTS,
    RECORDED_TWELVE_LEADS,
    TWELVE_LEAD_LAYOUT,
)
from .types import LeadType


@dataclass(frozen=True)
class LeadSetShape:
    """A recognized set of recorded leads and the layout it canonicalizes to.

    Attributes:
        name: Human readable description used in log messages.
        leads: Exact set of recorded lead types.
        layout: Canonical order of the resulting leads.
    """

    name: str
    leads: frozenset[LeadType]
    layout: tuple[LeadType, ...]

    def __post_init__(self):
        derived = set(self.derived)
        if not derived <= DERIVABLE_LEADS:
            raise ValueError(f"Shape '{self.name}' cannot derive {sorted(lead.name for lead in derived - DERIVABLE_LEADS)}")
        if derived and not {LeadType.I, LeadType.II} <= self.leads:
            raise ValueError(f"Shape '{self.name}' derives leads but does not contain leads I and II")

    @property
    def derived(self) -> tuple[LeadType, ...]:
        """Layout leads that have to be calculated, in layout order."""
        return tuple(lead for lead in self.layout if lead not in self.leads)

    @property
    def dropped(self) -> frozenset[LeadType]:
        """Recorded leads that are not part of the layout."""
        return self.leads - frozenset(self.layout)

    @property
    def uses_lead_iii(self) -> bool:
        """Whether derivation of aVL and aVF uses the recorded lead III."""
        return LeadType.III in self.leads

    def matches(self, types: Sequence[LeadType]) -> bool:
        """Check whether ``types`` is this shape's lead set, in any order and without duplicates."""
        return len(types) == len(self.leads) and len(set(types)) == len(types) and set(types) == self.leads


_TWELVE = frozenset(TWELVE_LEAD_LAYOUT)
_EIGHT = frozenset(RECORDED_TWELVE_LEADS)
_NINE = _EIGHT | {LeadType.III}


def _extension_name(extension: Iterable[LeadType]) -> str:
    return ", ".join(lead.name for lead in extension)


TWELVE_LEAD_SHAPES: tuple[LeadSetShape, ...] = (
    LeadSetShape("12 leads", _TWELVE, TWELVE_LEAD_LAYOUT),
    LeadSetShape("8 leads (I, II, V1-V6)", _EIGHT, TWELVE_LEAD_LAYOUT),
    LeadSetShape("9 leads (I, II, III, V1-V6)", _NINE, TWELVE_LEAD_LAYOUT),
    *(
        LeadSetShape(f"11 leads (I, II, V1-V6, {_extension_name(ext)})", _EIGHT | frozenset(ext), TWELVE_LEAD_LAYOUT)
        for ext in FIFTEEN_LEAD_EXTENSIONS
    ),
    *(
        LeadSetShape(
            f"12 leads (I, II, III, V1-V6, {_extension_name(ext)})", _NINE | frozenset(ext), TWELVE_LEAD_LAYOUT
        )
        for ext in FIFTEEN_LEAD_EXTENSIONS
    ),
    *(
        LeadSetShape(f"15 leads (12 leads, {_extension_name(ext)})", frozenset(layout), TWELVE_LEAD_LAYOUT)
        for ext, layout in zip(FIFTEEN_LEAD_EXTENSIONS, FIFTEEN_LEAD_LAYOUTS)
    ),
)

FIFTEEN_LEAD_SHAPES: tuple[LeadSetShape, ...] = tuple(
    shape
    for ext, layout in zip(FIFTEEN_LEAD_EXTENSIONS, FIFTEEN_LEAD_LAYOUTS)
    for shape in (
        LeadSetShape(f"15 leads (12 leads, {_extension_name(ext)})", frozenset(layout), layout),
        LeadSetShape(f"11 leads (I, II, V1-V6, {_extension_name(ext)})", _EIGHT | frozenset(ext), layout),
        LeadSetShape(f"12 leads (I, II, III, V1-V6, {_extension_name(ext)})", _NINE | frozenset(ext), layout),
    )
)


def match_shape(types: Sequence[LeadType], shapes: Iterable[LeadSetShape]) -> LeadSetShape | None:
    """Return the first shape whose lead set equals ``types``, or ``None``."""
    for shape in shapes:
        if shape.matches(types):
            return shape
    return None
