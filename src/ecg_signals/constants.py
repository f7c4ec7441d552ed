"""Constants for ECG signal handling."""

from .types import LeadType

# Standard 12-lead layout in canonical order
TWELVE_LEAD_LAYOUT = (
    LeadType.I,
    LeadType.II,
    LeadType.III,
    LeadType.aVR,
    LeadType.aVL,
    LeadType.aVF,
    LeadType.V1,
    LeadType.V2,
    LeadType.V3,
    LeadType.V4,
    LeadType.V5,
    LeadType.V6,
)

# Leads that are actually recorded by a 12-lead device, the rest is derived
RECORDED_TWELVE_LEADS = (
    LeadType.I,
    LeadType.II,
    LeadType.V1,
    LeadType.V2,
    LeadType.V3,
    LeadType.V4,
    LeadType.V5,
    LeadType.V6,
)

# Recognized extra leads of a 15-lead recording (right sided or posterior)
FIFTEEN_LEAD_EXTENSIONS = (
    (LeadType.V3R, LeadType.V4R, LeadType.V7),
    (LeadType.V7, LeadType.V8, LeadType.V9),
)

FIFTEEN_LEAD_LAYOUTS = tuple(TWELVE_LEAD_LAYOUT + extension for extension in FIFTEEN_LEAD_EXTENSIONS)

# Limb leads that can be calculated from I and II (Einthoven/Goldberger)
DERIVABLE_LEADS = frozenset({LeadType.III, LeadType.aVR, LeadType.aVL, LeadType.aVF})

# Max difference in samples between rhythm bounds of simultaneously recorded leads
SIMULTANEOUS_TOLERANCE = 5

# Lead count is stored in one byte by most formats
MAX_NR_LEADS = 255

# Seconds of rhythm loaded when a buffered recording is initialized
NR_SECS_LOADED_ON_INIT = 10

# Default type of a QRS zone without beat classification
QRS_ZONE_TYPE_UNKNOWN = 0xFFFF
