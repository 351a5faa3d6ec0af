"""Shared fixtures for the cloud pinyin tests."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qt_app():
    widgets = pytest.importorskip(
        "PyQt6.QtWidgets",
        reason="PyQt6 widgets require a Qt runtime",
        exc_type=ImportError,
    )
    app = widgets.QApplication.instance()
    if app is None:
        app = widgets.QApplication([])
    return app
