"""HTTP access to the Baidu and Google cloud pinyin services."""

from __future__ import annotations

import http.client
import logging
import socket
from enum import Enum
from functools import partial
from typing import Callable, Protocol
from urllib import error, parse, request

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from ..logging import log_call


logger = logging.getLogger(__name__)


BAIDU_URL_TEMPLATE = (
    "http://olime.baidu.com/py?input={query}&inputtype=py&bg=0&ed={count}"
    "&result=hanzi&resultcoding=utf-8&ch_en=1&clientinfo=web&version=1"
)
GOOGLE_URL_TEMPLATE = "https://www.google.com/inputtools/request?ime=pinyin&text={query}&num={count}"
DEFAULT_TIMEOUT_MS = 5000


class CloudSource(Enum):
    """Remote transliteration providers."""

    BAIDU = "baidu"
    GOOGLE = "google"

    @classmethod
    def coerce(cls, value: object, default: "CloudSource | None" = None) -> "CloudSource":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            if default is None:
                raise
            return default


class CloudInputError(RuntimeError):
    """Base exception for cloud request failures."""


class CloudConnectionError(CloudInputError):
    """Raised when the provider cannot be reached."""


class CloudResponseError(CloudInputError):
    """Raised when the provider answers with an HTTP error."""


def build_request_url(source: CloudSource, query: str, count: int) -> str:
    """Return the lookup URL for ``query`` asking for ``count`` candidates."""

    template = BAIDU_URL_TEMPLATE if source is CloudSource.BAIDU else GOOGLE_URL_TEMPLATE
    return template.format(query=parse.quote(query, safe=""), count=int(count))


ReplyCallback = Callable[["CloudReply", "bytes | None"], None]


class CloudReply:
    """Handle of one asynchronous GET; ``cancel()`` suppresses its completion."""

    def __init__(self, url: str, reply: QNetworkReply | None = None) -> None:
        self.url = url
        self.reply = reply
        self.cancelled = False
        self.finished = False

    def cancel(self) -> None:
        if self.cancelled or self.finished:
            return
        self.cancelled = True
        logger.info("Cancelling cloud request", extra={"url": self.url})
        if self.reply is not None:
            self.reply.abort()

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"CloudReply(url={self.url!r}, cancelled={self.cancelled}, finished={self.finished})"


class CloudTransport(Protocol):
    def get(self, url: str, callback: ReplyCallback) -> CloudReply: ...

    def fetch(self, url: str) -> bytes: ...


class QtCloudTransport(QObject):
    """Issue provider requests on the Qt event loop.

    :meth:`get` is non-blocking and reports through ``callback`` on the loop
    thread; :meth:`fetch` blocks the caller and is meant for the rare paths
    that need an answer immediately.
    """

    @log_call(logger=logger)
    def __init__(
        self,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._manager = QNetworkAccessManager(self)
        self.timeout_ms = max(int(timeout_ms), 1)

    @log_call(logger=logger)
    def configure(self, *, timeout_ms: int | None = None) -> None:
        if timeout_ms is not None:
            self.timeout_ms = max(int(timeout_ms), 1)

    @log_call(logger=logger)
    def get(self, url: str, callback: ReplyCallback) -> CloudReply:
        qt_request = QNetworkRequest(QUrl(url))
        qt_request.setRawHeader(b"Accept", b"application/json")
        qt_request.setTransferTimeout(self.timeout_ms)
        handle = CloudReply(url)
        handle.reply = self._manager.get(qt_request)
        handle.reply.finished.connect(partial(self._on_finished, handle, callback))
        logger.debug("Cloud request dispatched", extra={"url": url})
        return handle

    def _on_finished(self, handle: CloudReply, callback: ReplyCallback) -> None:
        reply = handle.reply
        handle.finished = True
        if reply is None:
            return
        try:
            if handle.cancelled:
                logger.debug("Dropping cancelled cloud reply", extra={"url": handle.url})
                return
            payload: bytes | None = None
            status = reply.attribute(QNetworkRequest.Attribute.HttpStatusCodeAttribute)
            if reply.error() != QNetworkReply.NetworkError.NoError:
                logger.warning(
                    "Cloud request failed",
                    extra={"url": handle.url, "error": reply.errorString()},
                )
            elif isinstance(status, int) and status >= 400:
                logger.warning(
                    "Cloud provider returned HTTP error",
                    extra={"url": handle.url, "status": status},
                )
            else:
                payload = reply.readAll().data()
        finally:
            reply.deleteLater()
        callback(handle, payload)

    @log_call(logger=logger)
    def fetch(self, url: str) -> bytes:
        """Perform a blocking GET and return the response body."""

        request_obj = request.Request(url, headers={"Accept": "application/json"}, method="GET")
        try:
            with request.urlopen(request_obj, timeout=self.timeout_ms / 1000) as response:
                return response.read()
        except error.HTTPError as exc:
            raise CloudResponseError(f"Cloud provider returned HTTP {exc.code}") from exc
        except error.URLError as exc:
            if isinstance(exc.reason, (TimeoutError, socket.timeout)):
                raise CloudConnectionError("Cloud request timed out") from exc
            raise CloudConnectionError(str(exc.reason)) from exc
        except (http.client.HTTPException, OSError) as exc:
            # Raised past urlopen while reading the status line or the body.
            raise CloudConnectionError(str(exc) or type(exc).__name__) from exc


__all__ = [
    "BAIDU_URL_TEMPLATE",
    "GOOGLE_URL_TEMPLATE",
    "CloudConnectionError",
    "CloudInputError",
    "CloudReply",
    "CloudResponseError",
    "CloudSource",
    "CloudTransport",
    "QtCloudTransport",
    "build_request_url",
]
