"""Single-slot delayed trigger used to coalesce keystrokes into one lookup."""

from __future__ import annotations

import logging
from functools import partial

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..logging import log_call


logger = logging.getLogger(__name__)


class DebounceScheduler(QObject):
    """Emit :attr:`triggered` once input has been quiet for the armed delay.

    Arming always supersedes the previous timer. Each timer carries the token
    it was armed with and is ignored on timeout unless that token is still the
    current one, so a timer that fires while being replaced is harmless.
    """

    triggered = pyqtSignal(str)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer: QTimer | None = None
        self._token = 0
        self._active_token: int | None = None

    @property
    def is_pending(self) -> bool:
        return self._active_token is not None

    @property
    def token(self) -> int | None:
        """Token of the armed timer, or ``None`` when nothing is pending."""

        return self._active_token

    @log_call(logger=logger)
    def arm(self, query: str, delay_ms: int) -> int:
        self.cancel()
        self._token += 1
        token = self._token
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(partial(self._on_timeout, token, query))
        self._timer = timer
        self._active_token = token
        timer.start(max(int(delay_ms), 0))
        return token

    @log_call(logger=logger)
    def cancel(self) -> None:
        self._active_token = None
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def _on_timeout(self, token: int, query: str) -> None:
        if token != self._active_token:
            logger.debug(
                "Ignoring superseded debounce timer",
                extra={"token": token, "active_token": self._active_token},
            )
            return
        self._active_token = None
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.deleteLater()
        self.triggered.emit(query)


__all__ = ["DebounceScheduler"]
