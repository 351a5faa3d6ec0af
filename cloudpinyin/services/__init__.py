"""Cloud lookup services: parsing, transport, debouncing and slot merging."""

from .candidates import (
    CLOUD_PREFIX,
    Candidate,
    CandidateType,
    ParserStatus,
    SelectResult,
    SlotPhase,
    SlotState,
    make_placeholders,
)
from .cloud_candidates import CloudCandidates
from .cloud_client import (
    CloudConnectionError,
    CloudInputError,
    CloudReply,
    CloudResponseError,
    CloudSource,
    QtCloudTransport,
    build_request_url,
)
from .debounce import DebounceScheduler
from .editor import PhoneticEditor, normalize_double_pinyin
from .response_parser import (
    BaiduResponseParser,
    CloudResponseParser,
    GoogleResponseParser,
    ParseOutcome,
    make_parser,
)
from .settings_service import CloudSettings, CloudSettingsService

__all__ = [
    "BaiduResponseParser",
    "CLOUD_PREFIX",
    "Candidate",
    "CandidateType",
    "CloudCandidates",
    "CloudConnectionError",
    "CloudInputError",
    "CloudReply",
    "CloudResponseError",
    "CloudResponseParser",
    "CloudSettings",
    "CloudSettingsService",
    "CloudSource",
    "DebounceScheduler",
    "GoogleResponseParser",
    "ParseOutcome",
    "ParserStatus",
    "PhoneticEditor",
    "QtCloudTransport",
    "SelectResult",
    "SlotPhase",
    "SlotState",
    "build_request_url",
    "make_parser",
    "make_placeholders",
    "normalize_double_pinyin",
]
