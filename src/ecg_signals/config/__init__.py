"""Configuration system for ecg-signals."""

from .loaders import ConfigLoader
from .models import BufferSettings, FilterSettings, LeadSettings, Settings

__all__ = [
    "BufferSettings",
    "ConfigLoader",
    "FilterSettings",
    "LeadSettings",
    "Settings",
]
