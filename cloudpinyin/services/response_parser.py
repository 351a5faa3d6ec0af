"""Decoders for the JSON payloads returned by the cloud pinyin providers."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..logging import log_call
from .candidates import (
    INVALID_DATA_GLYPH,
    Candidate,
    CandidateType,
    ParserStatus,
    SlotState,
)
from .cloud_client import CloudSource


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ParseOutcome:
    """Status, echoed query and decoded words of one response."""

    status: ParserStatus
    annotation: str | None = None
    words: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is ParserStatus.OK


class CloudResponseParser(ABC):
    """Turn a raw provider payload into a :class:`ParseOutcome`.

    A parser keeps the annotation and words of the last payload it decoded and
    resets them at the start of every :meth:`parse`, so one instance can be
    reused across requests.
    """

    source: CloudSource

    def __init__(self) -> None:
        self.annotation: str | None = None
        self.words: list[str] = []

    @log_call(logger=logger, include_result=True)
    def parse(self, payload: bytes | bytearray | str | None) -> ParseOutcome:
        self.annotation = None
        self.words = []
        if payload is None:
            return self._outcome(ParserStatus.NETWORK_ERROR)
        try:
            if isinstance(payload, (bytes, bytearray)):
                payload = bytes(payload).decode("utf-8")
            root = json.loads(payload)
        except (ValueError, RecursionError) as exc:
            logger.info(
                "Cloud response is not valid JSON",
                extra={"source": self.source.value, "error": str(exc)},
            )
            return self._outcome(ParserStatus.BAD_FORMAT)
        return self._outcome(self._parse_tree(root))

    def candidates(self) -> list[Candidate]:
        """Return cloud rows for the words of the last parsed payload."""

        rows = []
        for index, word in enumerate(self.words):
            state = (
                SlotState.failed(ParserStatus.INVALID_DATA)
                if word == INVALID_DATA_GLYPH
                else SlotState.result(word)
            )
            rows.append(Candidate(kind=CandidateType.CLOUD_INPUT, candidate_id=index, state=state))
        return rows

    def _outcome(self, status: ParserStatus) -> ParseOutcome:
        return ParseOutcome(status=status, annotation=self.annotation, words=list(self.words))

    @abstractmethod
    def _parse_tree(self, root: Any) -> ParserStatus:
        """Validate the decoded tree and populate annotation and words."""


class GoogleResponseParser(CloudResponseParser):
    """Parser for ``["SUCCESS", [["<query>", ["<word>", ...], ...]]]`` payloads."""

    source = CloudSource.GOOGLE

    def _parse_tree(self, root: Any) -> ParserStatus:
        if not isinstance(root, list):
            return ParserStatus.BAD_FORMAT
        if len(root) <= 1 or root[0] != "SUCCESS":
            return ParserStatus.INVALID_DATA

        response = root[1]
        if not isinstance(response, list) or not response:
            return ParserStatus.INVALID_DATA
        result = response[0]
        if not isinstance(result, list) or not result:
            return ParserStatus.INVALID_DATA
        annotation = result[0]
        if not isinstance(annotation, str):
            return ParserStatus.INVALID_DATA
        self.annotation = annotation

        words = result[1] if len(result) > 1 else None
        if not isinstance(words, list):
            return ParserStatus.INVALID_DATA
        if not words:
            return ParserStatus.NO_CANDIDATE
        if not all(isinstance(word, str) for word in words):
            return ParserStatus.INVALID_DATA
        self.words = list(words)
        return ParserStatus.OK


class BaiduResponseParser(CloudResponseParser):
    """Parser for ``{"status": "T", "result": [[["<word>", ...], ...], "<query>"]}``."""

    source = CloudSource.BAIDU

    def _parse_tree(self, root: Any) -> ParserStatus:
        if not isinstance(root, dict):
            return ParserStatus.BAD_FORMAT
        if root.get("status") != "T":
            return ParserStatus.INVALID_DATA

        result = root.get("result")
        if not isinstance(result, list) or len(result) < 2:
            return ParserStatus.INVALID_DATA
        entries, annotation = result[0], result[1]
        if not isinstance(entries, list) or not isinstance(annotation, str):
            return ParserStatus.INVALID_DATA
        # Baidu echoes the query split into syllables with apostrophes.
        self.annotation = annotation.replace("'", "")

        if not entries:
            return ParserStatus.NO_CANDIDATE
        words = []
        for entry in entries:
            if isinstance(entry, list) and entry and isinstance(entry[0], str):
                words.append(entry[0])
            else:
                words.append(INVALID_DATA_GLYPH)
        self.words = words
        return ParserStatus.OK


_PARSERS: dict[CloudSource, type[CloudResponseParser]] = {
    CloudSource.BAIDU: BaiduResponseParser,
    CloudSource.GOOGLE: GoogleResponseParser,
}


def make_parser(source: CloudSource) -> CloudResponseParser:
    """Return a fresh parser for ``source``."""

    return _PARSERS[source]()


__all__ = [
    "BaiduResponseParser",
    "CloudResponseParser",
    "GoogleResponseParser",
    "ParseOutcome",
    "make_parser",
]
