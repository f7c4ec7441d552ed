"""Pydantic models for configuration."""

import pydantic
from pydantic import BaseModel, Field

from ..constants import NR_SECS_LOADED_ON_INIT, SIMULTANEOUS_TOLERANCE


class BufferSettings(BaseModel):
    """Settings for windowed loading of large recordings.

    Attributes:
        load_signal_on_init: Whether ``BufferedSignals.init`` loads a first window.
        nr_secs_loaded_on_init: Length in seconds of the window loaded on init.
    """

    load_signal_on_init: bool = True
    nr_secs_loaded_on_init: int = Field(default=NR_SECS_LOADED_ON_INIT, gt=0)


class FilterSettings(BaseModel):
    """Default parameters of the Butterworth filters.

    Attributes:
        num_sections: Number of second-order sections per filter stage.
        bandpass_low: Lower edge of the band-pass filter in Hz.
        bandpass_high: Upper edge of the band-pass filter in Hz.
        lowpass_cutoff: Cutoff of the low-pass filter in Hz.
        highpass_cutoff: Cutoff of the high-pass (baseline) filter in Hz.
    """

    num_sections: int = Field(default=2, ge=1)
    bandpass_low: float = Field(default=0.05, gt=0)
    bandpass_high: float = Field(default=40.0, gt=0)
    lowpass_cutoff: float = Field(default=40.0, gt=0)
    highpass_cutoff: float = Field(default=0.05, gt=0)

    @pydantic.model_validator(mode="after")
    def check_band(self) -> "FilterSettings":
        """Validate that the band-pass edges are ordered.

        Raises:
            ValueError: If ``bandpass_low`` is not below ``bandpass_high``
        """
        if self.bandpass_low >= self.bandpass_high:
            raise ValueError(
                f"bandpass_low ({self.bandpass_low} Hz) must be below bandpass_high ({self.bandpass_high} Hz)"
            )
        return self


class LeadSettings(BaseModel):
    """Settings for lead-set classification.

    Attributes:
        simultaneous_tolerance: Max difference in samples between the rhythm
            bounds of leads that count as recorded simultaneously.
    """

    simultaneous_tolerance: int = Field(default=SIMULTANEOUS_TOLERANCE, ge=0)


class Settings(BaseModel):
    """Complete settings of the signal core.

    Examples:
        # Default settings
        settings = Settings()

        # Load only 5 seconds when a buffered recording is opened
        settings = Settings(buffer=BufferSettings(nr_secs_loaded_on_init=5))

        # Stricter simultaneity check
        settings = Settings(leads={"simultaneous_tolerance": 0})
    """

    buffer: BufferSettings = Field(default_factory=BufferSettings)
    filters: FilterSettings = Field(default_factory=FilterSettings)
    leads: LeadSettings = Field(default_factory=LeadSettings)
