"""Entry point for the interactive cloud pinyin lookup window."""

from __future__ import annotations

import sys

from PyQt6.QtWidgets import QApplication

from .logging import install_exception_hook, setup_logging
from .services.cloud_client import QtCloudTransport
from .services.settings_service import CloudSettingsService
from .ui import CloudLookupWindow


def main() -> None:
    """Start the PyQt6 application."""
    logger = setup_logging()
    install_exception_hook(logger)

    app = QApplication(sys.argv)
    app.setApplicationName("CloudPinyin")

    settings_service = CloudSettingsService()
    transport = QtCloudTransport(timeout_ms=settings_service.request_timeout_ms)
    settings_service.settings_changed.connect(
        lambda settings: transport.configure(timeout_ms=settings.request_timeout_ms)
    )
    logger.info(
        "Cloud services ready",
        extra={
            "source": settings_service.source.value,
            "candidates_number": settings_service.candidates_number,
        },
    )

    window = CloudLookupWindow(settings_service, transport)
    window.show()

    exit_code = app.exec()
    logger.info("Application event loop exited", extra={"exit_code": exit_code})
    window.cloud.reset()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
