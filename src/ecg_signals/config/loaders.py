"""Loaders for signal settings stored as JSON or TOML.

A settings file has up to three tables, each optional:

- ``buffer``: whether a buffered recording loads a window on init and how
  many seconds that window spans
- ``filters``: the number of second order sections and the default cutoffs
  used when a filter call leaves them out
- ``leads``: the tolerance in samples for leads to count as simultaneous
"""

import json
import tomllib
from pathlib import Path

from .._logging import logger
from .models import Settings


class ConfigLoader:
    """Read ``Settings`` for buffered loading, filtering and lead classification.

    Examples:
        # signals.toml
        # [buffer]
        # nr_secs_loaded_on_init = 4
        #
        # [filters]
        # num_sections = 3
        # bandpass_low = 0.5
        # bandpass_high = 35.0
        #
        # [leads]
        # simultaneous_tolerance = 2
        settings = ConfigLoader.from_file("signals.toml")
        signals = Signals(12, settings=settings)
    """

    @staticmethod
    def from_json(path: str | Path) -> Settings:
        """Load signal settings from a JSON object with ``buffer``, ``filters`` and ``leads`` keys.

        Raises:
            FileNotFoundError: If the file does not exist
            json.JSONDecodeError: If the file is not valid JSON
            pydantic.ValidationError: If a window, section count, cutoff or tolerance is out of range
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        logger.debug(f"Loaded signal settings from {path}: tables {sorted(data)}")
        return Settings(**data)

    @staticmethod
    def from_toml(path: str | Path) -> Settings:
        """Load signal settings from ``[buffer]``, ``[filters]`` and ``[leads]`` TOML tables.

        Raises:
            FileNotFoundError: If the file does not exist
            tomllib.TOMLDecodeError: If the file is not valid TOML
            pydantic.ValidationError: If a window, section count, cutoff or tolerance is out of range
        """
        path = Path(path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        logger.debug(f"Loaded signal settings from {path}: tables {sorted(data)}")
        return Settings(**data)

    @staticmethod
    def from_file(path: str | Path) -> Settings:
        """Load signal settings, picking the reader from the file extension.

        Args:
            path: Path to a ``.json`` or ``.toml`` settings file

        Raises:
            ValueError: If the extension is neither .json nor .toml
        """
        path = Path(path)

        if path.suffix == ".json":
            return ConfigLoader.from_json(path)
        elif path.suffix == ".toml":
            return ConfigLoader.from_toml(path)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}. Only .json and .toml are supported.")
