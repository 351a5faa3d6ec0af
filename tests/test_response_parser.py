"""Tests for the Baidu and Google response parsers."""

from __future__ import annotations

import json

import pytest

pytest.importorskip("PyQt6", reason="PyQt6 is required for the cloud services", exc_type=ImportError)

from cloudpinyin.services.candidates import INVALID_DATA_GLYPH, ParserStatus, SlotPhase
from cloudpinyin.services.cloud_client import CloudSource
from cloudpinyin.services.response_parser import (
    BaiduResponseParser,
    GoogleResponseParser,
    make_parser,
)


def test_baidu_payload_parses_words_and_annotation() -> None:
    parser = BaiduResponseParser()

    outcome = parser.parse('{"status":"T","result":[[["词",1]],"ci"]}'.encode("utf-8"))

    assert outcome.status is ParserStatus.OK
    assert outcome.annotation == "ci"
    assert outcome.words == ["词"]


def test_google_payload_parses_words_and_annotation() -> None:
    parser = GoogleResponseParser()

    outcome = parser.parse('["SUCCESS",[["ceshi",["测试"],[],{}]]]')

    assert outcome.status is ParserStatus.OK
    assert outcome.annotation == "ceshi"
    assert outcome.words == ["测试"]


def test_baidu_annotation_drops_syllable_separators() -> None:
    payload = {"status": "T", "result": [[["你好", 4], ["泥号", 4]], "ni'hao"]}

    outcome = BaiduResponseParser().parse(json.dumps(payload))

    assert outcome.annotation == "nihao"
    assert outcome.words == ["你好", "泥号"]


def test_google_failure_status_is_invalid_data() -> None:
    outcome = GoogleResponseParser().parse('["FAIL"]')

    assert outcome.status is ParserStatus.INVALID_DATA
    assert outcome.annotation is None


def test_google_non_success_status_is_invalid_data() -> None:
    outcome = GoogleResponseParser().parse('["FAILED_TO_PARSE_REQUEST_BODY",[]]')

    assert outcome.status is ParserStatus.INVALID_DATA


def test_baidu_missing_status_is_invalid_data() -> None:
    outcome = BaiduResponseParser().parse('{"result":[[["词",1]],"ci"]}')

    assert outcome.status is ParserStatus.INVALID_DATA
    assert outcome.annotation is None


def test_baidu_wrong_status_is_invalid_data() -> None:
    outcome = BaiduResponseParser().parse('{"status":"F","result":[[["词",1]],"ci"]}')

    assert outcome.status is ParserStatus.INVALID_DATA


@pytest.mark.parametrize(
    "payload",
    [
        '{"status":"T"}',
        '{"status":"T","result":[[["词",1]]]}',
        '{"status":"T","result":[[["词",1]],null]}',
        '{"status":"T","result":"ci"}',
    ],
)
def test_baidu_malformed_result_is_invalid_data(payload: str) -> None:
    assert BaiduResponseParser().parse(payload).status is ParserStatus.INVALID_DATA


@pytest.mark.parametrize(
    "payload",
    [
        '["SUCCESS",[]]',
        '["SUCCESS",[[null,["测试"]]]]',
        '["SUCCESS",[["ceshi"]]]',
        '["SUCCESS",[["ceshi","测试"]]]',
    ],
)
def test_google_malformed_result_is_invalid_data(payload: str) -> None:
    assert GoogleResponseParser().parse(payload).status is ParserStatus.INVALID_DATA


def test_zero_candidates_report_no_candidate_with_annotation() -> None:
    baidu = BaiduResponseParser().parse('{"status":"T","result":[[],"ci"]}')
    google = GoogleResponseParser().parse('["SUCCESS",[["ceshi",[],[],{}]]]')

    assert baidu.status is ParserStatus.NO_CANDIDATE
    assert baidu.annotation == "ci"
    assert google.status is ParserStatus.NO_CANDIDATE
    assert google.annotation == "ceshi"


def test_missing_payload_is_network_error() -> None:
    assert BaiduResponseParser().parse(None).status is ParserStatus.NETWORK_ERROR
    assert GoogleResponseParser().parse(None).status is ParserStatus.NETWORK_ERROR


@pytest.mark.parametrize("payload", [b"<html>busy</html>", b"", b"\xff\xfe{"])
def test_undecodable_payload_is_bad_format(payload: bytes) -> None:
    assert GoogleResponseParser().parse(payload).status is ParserStatus.BAD_FORMAT
    assert BaiduResponseParser().parse(payload).status is ParserStatus.BAD_FORMAT


def test_too_deeply_nested_payload_is_bad_format() -> None:
    payload = "[" * 200_000 + "]" * 200_000

    outcome = BaiduResponseParser().parse(payload)

    assert outcome.status is ParserStatus.BAD_FORMAT
    assert outcome.annotation is None


def test_wrong_root_type_is_bad_format() -> None:
    assert GoogleResponseParser().parse('{"status":"T"}').status is ParserStatus.BAD_FORMAT
    assert BaiduResponseParser().parse('["SUCCESS"]').status is ParserStatus.BAD_FORMAT


def test_empty_baidu_entry_becomes_invalid_marker() -> None:
    parser = BaiduResponseParser()

    outcome = parser.parse('{"status":"T","result":[[["你好",4],[]],"nihao"]}')

    assert outcome.status is ParserStatus.OK
    assert outcome.words == ["你好", INVALID_DATA_GLYPH]
    rows = parser.candidates()
    assert [row.candidate_id for row in rows] == [0, 1]
    assert rows[0].display_text == "☁你好"
    assert rows[1].state is not None and rows[1].state.phase is SlotPhase.ERROR


def test_parser_state_is_reset_between_payloads() -> None:
    parser = GoogleResponseParser()
    parser.parse('["SUCCESS",[["ceshi",["测试","侧室"]]]]')

    outcome = parser.parse('["FAIL"]')

    assert outcome.annotation is None
    assert outcome.words == []
    assert parser.words == []
    assert parser.candidates() == []


def test_make_parser_selects_provider() -> None:
    assert isinstance(make_parser(CloudSource.BAIDU), BaiduResponseParser)
    assert isinstance(make_parser(CloudSource.GOOGLE), GoogleResponseParser)
    assert make_parser(CloudSource.GOOGLE) is not make_parser(CloudSource.GOOGLE)
