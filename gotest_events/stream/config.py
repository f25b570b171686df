"""Event reader configuration file management.

Reads and writes the JSON (or YAML, by file suffix) file that controls how
an :class:`~gotest_events.stream.reader.EventReader` consumes a stream.
Values are validated as soon as they are loaded or set, so a reader never
starts with a configuration it cannot honour.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "normalize_nested": True,
    "on_decode_error": "raise",
    "skip_blank_lines": True,
}

# What the reader does with a line that fails to decode.
DECODE_ERROR_MODES = frozenset({"raise", "warn"})

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class ConfigError(ValueError):
    """An invalid configuration value."""


def _check_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def _check_mode(value: Any) -> str:
    if value not in DECODE_ERROR_MODES:
        raise ConfigError(
            f"on_decode_error must be one of {sorted(DECODE_ERROR_MODES)}, got {value!r}"
        )
    return value


def _is_yaml(path: Path) -> bool:
    return path.suffix in _YAML_SUFFIXES


def _read_mapping(path: Path) -> dict[str, Any]:
    """Parse a config file, or return ``{}`` if it is unreadable or not a mapping."""
    try:
        text = path.read_text()
        data = yaml.safe_load(text) if _is_yaml(path) else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


class ReaderConfig:
    """Settings for an event reader, optionally backed by a file.

    A missing, unreadable, or syntactically broken file leaves the defaults
    in place.  A file that parses but holds an invalid value raises
    :class:`ConfigError` from the constructor.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._values: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self.update(_read_mapping(path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReaderConfig:
        """Build an in-memory config.

        Raises:
            ConfigError: If a value has the wrong type or is unknown.
        """
        cfg = cls(None)
        cfg.update(data)
        return cfg

    def update(self, data: dict[str, Any]) -> None:
        """Apply the known keys of *data*; other keys are ignored."""
        self.set_config(
            normalize_nested=data.get("normalize_nested"),
            on_decode_error=data.get("on_decode_error"),
            skip_blank_lines=data.get("skip_blank_lines"),
        )

    def save(self) -> None:
        """Write the settings to :attr:`path` in the format its suffix names."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if _is_yaml(self.path):
            text = yaml.dump(self._values, default_flow_style=False, sort_keys=False)
        else:
            text = json.dumps(self._values, indent=2) + "\n"
        self.path.write_text(text)

    @property
    def config(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def normalize_nested(self) -> bool:
        """Whether nested sub-test results are rewritten while reading."""
        return self._values["normalize_nested"]

    @property
    def on_decode_error(self) -> str:
        """Either ``raise`` or ``warn``."""
        return self._values["on_decode_error"]

    @property
    def skip_blank_lines(self) -> bool:
        """Whether empty lines are skipped instead of failing to decode."""
        return self._values["skip_blank_lines"]

    def set_config(
        self,
        normalize_nested: bool | None = None,
        on_decode_error: str | None = None,
        skip_blank_lines: bool | None = None,
    ) -> None:
        """Update configuration values; ``None`` leaves a value unchanged.

        Raises:
            ConfigError: If a value has the wrong type or is unknown.
        """
        if normalize_nested is not None:
            self._values["normalize_nested"] = _check_bool("normalize_nested", normalize_nested)
        if on_decode_error is not None:
            self._values["on_decode_error"] = _check_mode(on_decode_error)
        if skip_blank_lines is not None:
            self._values["skip_blank_lines"] = _check_bool("skip_blank_lines", skip_blank_lines)
