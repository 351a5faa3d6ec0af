"""Tests for configuration persistence and cloud settings."""

from __future__ import annotations

import json

import pytest

from cloudpinyin.config import ConfigManager

pytest.importorskip("PyQt6", reason="PyQt6 is required for the settings service", exc_type=ImportError)

from cloudpinyin.services.cloud_client import CloudSource
from cloudpinyin.services.settings_service import CloudSettings, CloudSettingsService


def _manager(tmp_path, monkeypatch, **kwargs) -> ConfigManager:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return ConfigManager(app_name="CloudPinyinTest", **kwargs)


def test_config_manager_json_round_trip(tmp_path, monkeypatch) -> None:
    manager = _manager(tmp_path, monkeypatch)
    assert manager.load() == {}

    manager.save({"cloud": {"source": "google"}})
    merged = manager.update({"cloud": {"candidates_number": 4}, "other": 1})

    assert merged == {"cloud": {"source": "google", "candidates_number": 4}, "other": 1}
    assert json.loads(manager.config_path.read_text(encoding="utf-8")) == merged
    assert manager.config_path.parent == tmp_path / "CloudPinyinTest"


def test_config_manager_ini_sections(tmp_path, monkeypatch) -> None:
    manager = _manager(tmp_path, monkeypatch, format="ini")

    manager.update({"cloud": {"source": "baidu", "double_pinyin": True}})

    assert manager.config_path.name == "settings.ini"
    assert manager.load_section("cloud") == {"source": "baidu", "double_pinyin": "True"}
    with pytest.raises(ValueError):
        manager.save({"cloud": "not-a-section"})


def test_config_manager_rejects_unknown_format(tmp_path, monkeypatch) -> None:
    with pytest.raises(ValueError):
        _manager(tmp_path, monkeypatch, format="yaml")


def test_settings_default_when_nothing_stored(tmp_path, monkeypatch) -> None:
    service = CloudSettingsService(_manager(tmp_path, monkeypatch))

    assert service.settings == CloudSettings()
    assert service.source is CloudSource.BAIDU
    assert service.request_delay_ms == 600
    assert service.candidates_number == 1
    assert service.double_pinyin is False


def test_settings_fall_back_on_malformed_values(tmp_path, monkeypatch) -> None:
    manager = _manager(tmp_path, monkeypatch)
    manager.save(
        {
            "cloud": {
                "source": "bing",
                "request_delay_ms": "soon",
                "candidates_number": 99,
                "double_pinyin": "yes",
                "request_timeout_ms": 10,
            }
        }
    )

    settings = CloudSettingsService(manager).settings

    assert settings.source is CloudSource.BAIDU
    assert settings.request_delay_ms == 600
    assert settings.candidates_number == 10
    assert settings.double_pinyin is True
    assert settings.request_timeout_ms == 500


def test_setters_persist_and_notify(tmp_path, monkeypatch) -> None:
    manager = _manager(tmp_path, monkeypatch)
    service = CloudSettingsService(manager)
    changes: list[CloudSettings] = []
    service.settings_changed.connect(changes.append)

    service.set_source("google")
    service.set_candidates_number(0)
    service.set_request_delay(250)
    service.set_request_delay(250)

    assert [change.source for change in changes] == [CloudSource.GOOGLE] * 2
    assert changes[-1].request_delay_ms == 250
    assert service.candidates_number == 1
    stored = manager.load_section("cloud")
    assert stored["source"] == "google"
    assert stored["request_delay_ms"] == 250

    reloaded = CloudSettingsService(manager)
    assert reloaded.settings == service.settings


def test_double_pinyin_and_timeout_setters(tmp_path, monkeypatch) -> None:
    manager = _manager(tmp_path, monkeypatch)
    service = CloudSettingsService(manager)
    changes: list[CloudSettings] = []
    service.settings_changed.connect(changes.append)

    service.set_double_pinyin(True)
    service.set_request_timeout(120_000)
    service.set_request_timeout("fast")

    assert service.double_pinyin is True
    assert [change.request_timeout_ms for change in changes] == [5000, 60_000, 5000]
    stored = manager.load_section("cloud")
    assert stored["double_pinyin"] is True
    assert stored["request_timeout_ms"] == 5000


def test_settings_read_from_ini_strings(tmp_path, monkeypatch) -> None:
    manager = _manager(tmp_path, monkeypatch, format="ini")
    manager.save({"cloud": {"source": "google", "candidates_number": "3", "double_pinyin": "false"}})

    settings = CloudSettingsService(manager).settings

    assert settings.source is CloudSource.GOOGLE
    assert settings.candidates_number == 3
    assert settings.double_pinyin is False
