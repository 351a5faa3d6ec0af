"""Cloud candidate lookups spliced into the pinyin editor's candidate list.

One :class:`CloudCandidates` instance serves one editing session. It decides
when a lookup is worth a round trip, debounces keystrokes, keeps at most one
request in flight, and rewrites its cached cloud slots in place as the request
moves from pending to loading to a result or an error marker.
"""

from __future__ import annotations

import logging
from typing import Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from ..logging import log_call
from .candidates import (
    INVALID_DATA_GLYPH,
    Candidate,
    CandidateType,
    ParserStatus,
    SelectResult,
    SlotState,
    make_placeholders,
)
from .cloud_client import (
    CloudInputError,
    CloudReply,
    CloudSource,
    CloudTransport,
    build_request_url,
)
from .debounce import DebounceScheduler
from .editor import PhoneticEditor, normalize_double_pinyin
from .response_parser import ParseOutcome, make_parser
from .settings_service import CloudSettings


logger = logging.getLogger(__name__)


# Raw pinyin shorter than this no longer refreshes the candidate list.
MINIMUM_TRIGGER_LENGTH = 2
# Best sentence candidates shorter than this (in characters) are not looked up.
MINIMUM_CANDIDATE_LENGTH = 2


class SettingsProvider(Protocol):
    @property
    def settings(self) -> CloudSettings: ...


class CloudCandidates(QObject):
    """Manage cloud placeholder slots for a phonetic editor."""

    request_issued = pyqtSignal(str)
    response_processed = pyqtSignal(object)

    @log_call(logger=logger)
    def __init__(
        self,
        editor: PhoneticEditor,
        settings: SettingsProvider,
        transport: CloudTransport,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._editor = editor
        self._settings_provider = settings
        self._transport = transport
        self._settings = settings.settings
        self._slots: list[Candidate] = []
        self._last_requested_query = ""
        self._in_flight: CloudReply | None = None
        self._scheduler = DebounceScheduler(self)
        self._scheduler.triggered.connect(self.request)

    @property
    def cached_candidates(self) -> list[Candidate]:
        return self._slots

    @property
    def last_requested_query(self) -> str:
        return self._last_requested_query

    @property
    def in_flight(self) -> CloudReply | None:
        return self._in_flight

    @property
    def scheduler(self) -> DebounceScheduler:
        return self._scheduler

    def current_query(self) -> str:
        """Return the pinyin that a lookup for the current input would send."""

        if self._settings_provider.settings.double_pinyin:
            return normalize_double_pinyin(self._editor.full_pinyin_buffer())
        return self._editor.text

    # ------------------------------------------------------------------
    # Candidate list integration
    @log_call(logger=logger, include_result=True)
    def process_candidates(self, candidates: list[Candidate]) -> bool:
        """Splice cloud slots into ``candidates``.

        Returns ``True`` only when a new lookup was scheduled.
        """

        if not candidates:
            return False
        if len(candidates[0].display_text) < MINIMUM_CANDIDATE_LENGTH:
            self._last_requested_query = ""
            return False

        position = next(
            (
                index
                for index, candidate in enumerate(candidates)
                if candidate.kind is not CandidateType.NBEST_MATCH
            ),
            len(candidates),
        )

        query = self.current_query()
        if query == self._last_requested_query:
            candidates[position:position] = [slot.copy() for slot in self._slots]
            return False

        if position < len(candidates) and candidates[position].is_cloud:
            return False

        self._settings = self._settings_provider.settings
        self._slots = make_placeholders(self._settings.candidates_number)
        candidates[position:position] = [slot.copy() for slot in self._slots]
        self._scheduler.arm(query, self._settings.request_delay_ms)
        logger.debug(
            "Cloud lookup scheduled",
            extra={"query": query, "delay_ms": self._settings.request_delay_ms},
        )
        return True

    @log_call(logger=logger, include_result=True)
    def select_candidate(self, candidate: Candidate) -> SelectResult:
        """Finalize a chosen cloud row from the cached slot with the same id."""

        if not candidate.is_cloud:
            raise ValueError("select_candidate expects a cloud candidate")
        if candidate.state is None or candidate.state.is_transient:
            return SelectResult.ALREADY_HANDLED
        for slot in self._slots:
            if slot.candidate_id != candidate.candidate_id:
                continue
            if slot.state is None or slot.state.is_transient:
                return SelectResult.ALREADY_HANDLED
            candidate.state = slot.state
            return SelectResult.COMMIT | SelectResult.MODIFY_IN_PLACE
        return SelectResult.ALREADY_HANDLED

    @log_call(logger=logger)
    def reset(self) -> None:
        """Forget the current lookup when the editing session ends."""

        self._scheduler.cancel()
        if self._in_flight is not None:
            self._in_flight.cancel()
            self._in_flight = None
        self._slots = []
        self._last_requested_query = ""

    # ------------------------------------------------------------------
    # Requests
    @log_call(logger=logger)
    def request(self, query: str) -> None:
        """Send ``query`` to the configured provider without blocking."""

        source = self._settings.source
        url = build_request_url(source, query, self._settings.candidates_number)

        if self._in_flight is not None:
            self._in_flight.cancel()
            self._in_flight = None

        def on_reply(handle: CloudReply, payload: bytes | None) -> None:
            self._on_reply(handle, payload, source)

        self._in_flight = self._transport.get(url, on_reply)
        self._last_requested_query = query
        for slot in self._slots:
            slot.state = SlotState.loading()
        logger.info("Cloud request issued", extra={"source": source.value, "query": query})
        self.request_issued.emit(url)
        self._refresh_editor()

    @log_call(logger=logger)
    def request_blocking(
        self, query: str, candidates: list[Candidate] | None = None
    ) -> list[Candidate]:
        """Look ``query`` up synchronously and write the answer into ``candidates``.

        This blocks the event loop until the provider answers or fails. When no
        list is supplied, a fresh set of placeholder slots is created.
        """

        settings = self._settings_provider.settings
        target = candidates if candidates is not None else make_placeholders(settings.candidates_number)
        url = build_request_url(settings.source, query, settings.candidates_number)
        try:
            payload: bytes | None = self._transport.fetch(url)
        except CloudInputError as exc:
            logger.warning(
                "Blocking cloud request failed",
                extra={"source": settings.source.value, "error": str(exc)},
            )
            payload = None
        self.process_response(payload, target, settings.source)
        return target

    def _on_reply(self, handle: CloudReply, payload: bytes | None, source: CloudSource) -> None:
        if handle is not self._in_flight:
            logger.debug("Ignoring reply of a superseded request", extra={"url": handle.url})
            return
        try:
            written = self.process_response(payload, self._slots, source)
        finally:
            self._in_flight = None
        if written:
            self._refresh_editor()

    # ------------------------------------------------------------------
    # Response handling
    @log_call(logger=logger, include_result=True)
    def process_response(
        self,
        payload: bytes | str | None,
        slots: list[Candidate],
        source: CloudSource,
    ) -> bool:
        """Parse ``payload`` and merge it into ``slots``.

        Returns ``True`` when any slot was rewritten.
        """

        outcome = make_parser(source).parse(payload)
        written = self._merge(outcome, slots, source)
        self.response_processed.emit(outcome)
        return written

    def _merge(self, outcome: ParseOutcome, slots: list[Candidate], source: CloudSource) -> bool:
        written = False
        if outcome.status is ParserStatus.NETWORK_ERROR:
            self._fill(slots, SlotState.failed(ParserStatus.INVALID_DATA))
            written = True

        if outcome.annotation is None:
            # No echo means the request never completed; it may have been cancelled.
            logger.debug("Cloud response without annotation", extra={"status": outcome.status.value})
            return written

        if source is CloudSource.GOOGLE:
            current = self.current_query()
            if outcome.annotation != current:
                logger.info(
                    "Discarding stale cloud response",
                    extra={"annotation": outcome.annotation, "current": current},
                )
                return written

        if outcome.ok:
            for slot, word in zip(slots, outcome.words):
                if word == INVALID_DATA_GLYPH:
                    slot.state = SlotState.failed(ParserStatus.INVALID_DATA)
                else:
                    slot.state = SlotState.result(word)
        else:
            self._fill(slots, SlotState.failed(outcome.status))
        logger.info(
            "Cloud response applied",
            extra={"status": outcome.status.value, "words": len(outcome.words)},
        )
        return True

    @staticmethod
    def _fill(slots: list[Candidate], state: SlotState) -> None:
        for slot in slots:
            slot.state = state

    def _refresh_editor(self) -> None:
        if len(self._editor.text) >= MINIMUM_TRIGGER_LENGTH:
            self._editor.refresh_candidates()


__all__ = [
    "CloudCandidates",
    "MINIMUM_CANDIDATE_LENGTH",
    "MINIMUM_TRIGGER_LENGTH",
]
