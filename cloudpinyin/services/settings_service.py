"""Persisted cloud input preferences."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from ..config import ConfigManager
from ..logging import log_call
from .cloud_client import DEFAULT_TIMEOUT_MS, CloudSource


logger = logging.getLogger(__name__)


SECTION = "cloud"
DEFAULT_SOURCE = CloudSource.BAIDU
DEFAULT_REQUEST_DELAY_MS = 600
DEFAULT_CANDIDATES_NUMBER = 1
MIN_CANDIDATES_NUMBER = 1
MAX_CANDIDATES_NUMBER = 10
MAX_REQUEST_DELAY_MS = 10_000
MIN_TIMEOUT_MS = 500
MAX_TIMEOUT_MS = 60_000


@log_call(logger=logger, include_result=True)
def _clamp(value: Any, *, low: int, high: int, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = fallback
    return min(high, max(low, number))


def _coerce_bool(value: Any, fallback: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        return fallback
    if isinstance(value, (int, float)):
        return bool(value)
    return fallback


@dataclass(frozen=True, slots=True)
class CloudSettings:
    """Snapshot of the options that drive a cloud lookup."""

    source: CloudSource = DEFAULT_SOURCE
    request_delay_ms: int = DEFAULT_REQUEST_DELAY_MS
    candidates_number: int = DEFAULT_CANDIDATES_NUMBER
    double_pinyin: bool = False
    request_timeout_ms: int = DEFAULT_TIMEOUT_MS

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        return data

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "CloudSettings":
        """Build settings from stored values, replacing anything malformed."""

        return cls(
            source=CloudSource.coerce(values.get("source"), DEFAULT_SOURCE),
            request_delay_ms=_clamp(
                values.get("request_delay_ms", DEFAULT_REQUEST_DELAY_MS),
                low=0,
                high=MAX_REQUEST_DELAY_MS,
                fallback=DEFAULT_REQUEST_DELAY_MS,
            ),
            candidates_number=_clamp(
                values.get("candidates_number", DEFAULT_CANDIDATES_NUMBER),
                low=MIN_CANDIDATES_NUMBER,
                high=MAX_CANDIDATES_NUMBER,
                fallback=DEFAULT_CANDIDATES_NUMBER,
            ),
            double_pinyin=_coerce_bool(values.get("double_pinyin"), False),
            request_timeout_ms=_clamp(
                values.get("request_timeout_ms", DEFAULT_TIMEOUT_MS),
                low=MIN_TIMEOUT_MS,
                high=MAX_TIMEOUT_MS,
                fallback=DEFAULT_TIMEOUT_MS,
            ),
        )


class CloudSettingsService(QObject):
    """Load, persist and broadcast :class:`CloudSettings`."""

    settings_changed = pyqtSignal(object)

    @log_call(logger=logger)
    def __init__(self, config_manager: ConfigManager | None = None) -> None:
        super().__init__()
        self._config = config_manager or ConfigManager()
        self._settings = CloudSettings()
        self.reload()

    @property
    def settings(self) -> CloudSettings:
        return self._settings

    @property
    def source(self) -> CloudSource:
        return self._settings.source

    @property
    def request_delay_ms(self) -> int:
        return self._settings.request_delay_ms

    @property
    def candidates_number(self) -> int:
        return self._settings.candidates_number

    @property
    def double_pinyin(self) -> bool:
        return self._settings.double_pinyin

    @property
    def request_timeout_ms(self) -> int:
        return self._settings.request_timeout_ms

    # ------------------------------------------------------------------
    @log_call(logger=logger)
    def reload(self) -> None:
        """Reload settings from disk, keeping defaults for bad entries."""

        self._settings = CloudSettings.from_mapping(self._config.load_section(SECTION))
        logger.info("Cloud settings loaded", extra=self._settings.as_dict())

    @log_call(logger=logger)
    def save(self) -> None:
        self._config.update({SECTION: self._settings.as_dict()})

    # ------------------------------------------------------------------
    def set_source(self, source: CloudSource | str) -> None:
        self._apply(source=CloudSource.coerce(source))

    def set_request_delay(self, delay_ms: int) -> None:
        self._apply(
            request_delay_ms=_clamp(
                delay_ms, low=0, high=MAX_REQUEST_DELAY_MS, fallback=DEFAULT_REQUEST_DELAY_MS
            )
        )

    def set_candidates_number(self, count: int) -> None:
        self._apply(
            candidates_number=_clamp(
                count,
                low=MIN_CANDIDATES_NUMBER,
                high=MAX_CANDIDATES_NUMBER,
                fallback=DEFAULT_CANDIDATES_NUMBER,
            )
        )

    def set_double_pinyin(self, enabled: bool) -> None:
        self._apply(double_pinyin=bool(enabled))

    def set_request_timeout(self, timeout_ms: int) -> None:
        self._apply(
            request_timeout_ms=_clamp(
                timeout_ms, low=MIN_TIMEOUT_MS, high=MAX_TIMEOUT_MS, fallback=DEFAULT_TIMEOUT_MS
            )
        )

    @log_call(logger=logger)
    def _apply(self, **changes: Any) -> None:
        updated = replace(self._settings, **changes)
        if updated == self._settings:
            return
        self._settings = updated
        self.save()
        self.settings_changed.emit(updated)


__all__ = ["CloudSettings", "CloudSettingsService"]
