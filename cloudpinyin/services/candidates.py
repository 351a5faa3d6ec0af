"""Candidate rows and the per-slot state of cloud lookups."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace


CLOUD_PREFIX = "☁"

PENDING_GLYPH = "[⏱️]"
LOADING_GLYPH = "..."
NO_CANDIDATE_GLYPH = "[🚫]"
INVALID_DATA_GLYPH = "[❌]"
BAD_FORMAT_GLYPH = "[❓]"

PENDING_TEXT = CLOUD_PREFIX + PENDING_GLYPH
LOADING_TEXT = CLOUD_PREFIX + LOADING_GLYPH
NO_CANDIDATE_TEXT = CLOUD_PREFIX + NO_CANDIDATE_GLYPH
INVALID_DATA_TEXT = CLOUD_PREFIX + INVALID_DATA_GLYPH
BAD_FORMAT_TEXT = CLOUD_PREFIX + BAD_FORMAT_GLYPH


class CandidateType(enum.Enum):
    """Origin of a row in the editor's candidate list."""

    NBEST_MATCH = "nbest"
    NORMAL = "normal"
    CLOUD_INPUT = "cloud"


class ParserStatus(enum.Enum):
    """Outcome of decoding one provider response."""

    OK = "ok"
    INVALID_DATA = "invalid_data"
    BAD_FORMAT = "bad_format"
    NO_CANDIDATE = "no_candidate"
    NETWORK_ERROR = "network_error"

    @property
    def glyph(self) -> str:
        """Marker shown in cloud slots when a lookup ends with this status."""

        if self is ParserStatus.NO_CANDIDATE:
            return NO_CANDIDATE_GLYPH
        if self is ParserStatus.BAD_FORMAT:
            return BAD_FORMAT_GLYPH
        return INVALID_DATA_GLYPH


class SlotPhase(enum.Enum):
    PENDING = "pending"
    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class SlotState:
    """Progress of one cloud slot; the rendered text is derived from it."""

    phase: SlotPhase
    text: str = ""
    error: ParserStatus | None = None

    @classmethod
    def pending(cls) -> "SlotState":
        return cls(SlotPhase.PENDING)

    @classmethod
    def loading(cls) -> "SlotState":
        return cls(SlotPhase.LOADING)

    @classmethod
    def result(cls, text: str) -> "SlotState":
        return cls(SlotPhase.RESULT, text=text)

    @classmethod
    def failed(cls, status: ParserStatus) -> "SlotState":
        return cls(SlotPhase.ERROR, error=status)

    @property
    def is_transient(self) -> bool:
        """``True`` while the slot shows a marker rather than a real word."""

        return self.phase is not SlotPhase.RESULT

    @property
    def glyph(self) -> str:
        if self.phase is SlotPhase.PENDING:
            return PENDING_GLYPH
        if self.phase is SlotPhase.LOADING:
            return LOADING_GLYPH
        if self.phase is SlotPhase.ERROR:
            return (self.error or ParserStatus.INVALID_DATA).glyph
        return self.text


@dataclass(slots=True)
class Candidate:
    """One selectable row of the editor's candidate list.

    Cloud rows carry a :class:`SlotState` and always render with the cloud
    marker; every other row renders ``text`` verbatim.
    """

    text: str = ""
    kind: CandidateType = CandidateType.NORMAL
    candidate_id: int = 0
    state: SlotState | None = None

    @classmethod
    def placeholder(cls, candidate_id: int) -> "Candidate":
        return cls(kind=CandidateType.CLOUD_INPUT, candidate_id=candidate_id, state=SlotState.pending())

    @property
    def is_cloud(self) -> bool:
        return self.kind is CandidateType.CLOUD_INPUT

    @property
    def display_text(self) -> str:
        if self.is_cloud:
            return CLOUD_PREFIX + self.commit_text
        return self.text

    @property
    def commit_text(self) -> str:
        """Text committed when the row is chosen, without the cloud marker."""

        if self.is_cloud:
            return (self.state or SlotState.pending()).glyph
        return self.text

    def copy(self) -> "Candidate":
        return replace(self)


class SelectResult(enum.Flag):
    """Instructions returned to the editor after a cloud row is chosen."""

    ALREADY_HANDLED = enum.auto()
    COMMIT = enum.auto()
    MODIFY_IN_PLACE = enum.auto()


def make_placeholders(count: int) -> list[Candidate]:
    """Return ``count`` pending cloud slots numbered ``0..count-1``."""

    return [Candidate.placeholder(index) for index in range(max(count, 0))]


__all__ = [
    "BAD_FORMAT_GLYPH",
    "BAD_FORMAT_TEXT",
    "CLOUD_PREFIX",
    "Candidate",
    "CandidateType",
    "INVALID_DATA_GLYPH",
    "INVALID_DATA_TEXT",
    "LOADING_GLYPH",
    "LOADING_TEXT",
    "NO_CANDIDATE_GLYPH",
    "NO_CANDIDATE_TEXT",
    "PENDING_GLYPH",
    "PENDING_TEXT",
    "ParserStatus",
    "SelectResult",
    "SlotPhase",
    "SlotState",
    "make_placeholders",
]
