"""Persistence of user settings for the cloud input engine."""

from __future__ import annotations

import json
import os
import sys
from configparser import ConfigParser
from pathlib import Path
from typing import Any, MutableMapping

CONFIG_DIR_NAME = "CloudPinyin"
DEFAULT_JSON_FILENAME = "settings.json"
DEFAULT_INI_FILENAME = "settings.ini"
SUPPORTED_FORMATS = ("json", "ini")


def get_user_config_dir(app_name: str = CONFIG_DIR_NAME) -> Path:
    """Return (and create) the per-user configuration directory.

    ``%APPDATA%`` is used on Windows, ``$XDG_CONFIG_HOME`` or ``~/.config``
    everywhere else.
    """
    if sys.platform.startswith("win"):
        base_dir = Path(os.getenv("APPDATA", Path.home()))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    config_dir = base_dir / app_name
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


class ConfigManager:
    """Read and write a settings file made of named sections."""

    def __init__(
        self,
        app_name: str = CONFIG_DIR_NAME,
        *,
        format: str = "json",
        filename: str | None = None,
    ) -> None:
        self.app_name = app_name
        self.format = format.lower()
        if self.format not in SUPPORTED_FORMATS:
            raise ValueError(f"format must be one of {', '.join(SUPPORTED_FORMATS)}")
        if filename is None:
            filename = DEFAULT_JSON_FILENAME if self.format == "json" else DEFAULT_INI_FILENAME
        self.config_dir = get_user_config_dir(app_name)
        self.config_path = self.config_dir / filename

    def load(self) -> dict[str, Any]:
        """Return the stored settings, or an empty mapping when none exist."""
        if not self.config_path.exists():
            return {}
        if self.format == "json":
            return self._read_json()
        return self._read_ini()

    def load_section(self, section: str) -> dict[str, Any]:
        """Return a single section, ignoring entries that are not mappings."""
        data = self.load()
        values = data.get(section) if isinstance(data, dict) else None
        return dict(values) if isinstance(values, MutableMapping) else {}

    def save(self, data: MutableMapping[str, Any]) -> None:
        if self.format == "json":
            self._write_json(data)
        else:
            self._write_ini(data)

    def update(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        """Merge ``data`` section by section into the stored settings."""
        current = self.load()
        for section, values in data.items():
            if not isinstance(values, MutableMapping):
                if self.format == "ini":
                    raise ValueError("INI updates require a mapping per section")
                current[section] = values
                continue
            existing = current.get(section)
            if not isinstance(existing, dict):
                existing = {}
            existing.update(values)
            current[section] = existing
        self.save(current)
        return current

    # ------------------------------------------------------------------
    def _read_json(self) -> dict[str, Any]:
        with self.config_path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def _read_ini(self) -> dict[str, Any]:
        parser = ConfigParser()
        parser.read(self.config_path, encoding="utf-8")
        return {section: dict(parser.items(section)) for section in parser.sections()}

    def _write_json(self, data: MutableMapping[str, Any]) -> None:
        with self.config_path.open("w", encoding="utf-8") as fh:
            json.dump(dict(data), fh, indent=2, sort_keys=True, ensure_ascii=False)
            fh.write("\n")

    def _write_ini(self, data: MutableMapping[str, Any]) -> None:
        parser = ConfigParser()
        for section, values in data.items():
            if not isinstance(values, MutableMapping):
                raise ValueError("INI configuration requires mapping values per section")
            parser[section] = {str(key): str(value) for key, value in values.items()}
        with self.config_path.open("w", encoding="utf-8") as fh:
            parser.write(fh)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"ConfigManager(app_name={self.app_name!r}, format={self.format!r}, path={self.config_path!s})"


__all__ = ["ConfigManager", "get_user_config_dir"]
