"""Logging helpers shared by the cloud input services."""

from __future__ import annotations

import functools
import inspect
import logging
import platform
import sys
import threading
import time
from pathlib import Path
from typing import Any, Optional

from .config import CONFIG_DIR_NAME, get_user_config_dir

LOG_FILENAME = "cloudpinyin.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_EXCEPTION_HOOK_INSTALLED = False
_HOOK_LOCK = threading.Lock()


def setup_logging(
    app_name: str = CONFIG_DIR_NAME,
    *,
    level: int = logging.INFO,
    log_filename: Optional[str] = None,
) -> logging.Logger:
    """Attach console and file handlers to the root logger.

    Calling this more than once is harmless: when the root logger already has
    handlers the application logger is returned untouched.
    """

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return logging.getLogger(app_name)

    log_path = Path(get_user_config_dir(app_name)) / (log_filename or LOG_FILENAME)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)

    logger = logging.getLogger(app_name)
    logger.info(
        "Logging initialised",
        extra={"log_path": str(log_path), "level": logging.getLevelName(level)},
    )
    logger.debug(
        "Runtime environment",
        extra={"python": platform.python_version(), "platform": platform.platform()},
    )
    return logger


def install_exception_hook(logger: logging.Logger) -> None:
    """Log unhandled exceptions from the main thread and worker threads."""

    global _EXCEPTION_HOOK_INSTALLED
    with _HOOK_LOCK:
        if _EXCEPTION_HOOK_INSTALLED:
            return
        _EXCEPTION_HOOK_INSTALLED = True

    default_hook = sys.excepthook
    default_thread_hook = threading.excepthook

    def handle_exception(exc_type, exc_value, exc_traceback):
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.critical(
                "Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback)
            )
        default_hook(exc_type, exc_value, exc_traceback)

    def handle_thread_exception(args):
        if not issubclass(args.exc_type, KeyboardInterrupt):
            thread_name = args.thread.name if args.thread is not None else "<unknown>"
            logger.critical(
                "Unhandled exception in thread %s",
                thread_name,
                exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
            )
        default_thread_hook(args)

    sys.excepthook = handle_exception
    threading.excepthook = handle_thread_exception


def _safe_repr(value: Any, *, max_length: int = 500) -> str:
    try:
        result = repr(value)
    except Exception:
        result = object.__repr__(value)
    if len(result) > max_length:
        return result[: max_length - 1] + "…"
    return result


def _format_arguments(signature: inspect.Signature, *args: Any, **kwargs: Any) -> str:
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return "unavailable"
    return ", ".join(
        f"{name}={_safe_repr(value)}"
        for name, value in bound.arguments.items()
        if name not in {"self", "cls"}
    )


def log_call(
    _func: Optional[Any] = None,
    *,
    logger: logging.Logger | str | None = None,
    level: int = logging.DEBUG,
    include_args: bool = True,
    include_result: bool = False,
    exc_level: int = logging.ERROR,
) -> Any:
    """Log entry, exit, elapsed time and failures of the decorated callable.

    Usable bare (``@log_call``) or with options
    (``@log_call(logger=logger, include_result=True)``).
    """

    def decorator(func: Any) -> Any:
        signature = inspect.signature(func)
        module = getattr(func, "__module__", "")
        qualname = getattr(func, "__qualname__", getattr(func, "__name__", "<call>"))
        identifier = f"{module}.{qualname}" if module else qualname

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if isinstance(logger, logging.Logger):
                target = logger
            else:
                target = logging.getLogger(logger or module)
            trace = target.isEnabledFor(level)
            if not trace and not target.isEnabledFor(exc_level):
                return func(*args, **kwargs)
            if trace and include_args:
                target.log(level, "Calling %s(%s)", identifier, _format_arguments(signature, *args, **kwargs))
            elif trace:
                target.log(level, "Calling %s", identifier)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                target.log(
                    exc_level,
                    "Error in %s after %.3fs",
                    identifier,
                    time.perf_counter() - start,
                    exc_info=True,
                )
                raise
            elapsed = time.perf_counter() - start
            if not trace:
                return result
            if include_result:
                target.log(level, "%s returned %s (%.3fs)", identifier, _safe_repr(result), elapsed)
            else:
                target.log(level, "%s completed in %.3fs", identifier, elapsed)
            return result

        return wrapper

    if callable(_func):
        return decorator(_func)
    return decorator


__all__ = [
    "setup_logging",
    "install_exception_hook",
    "log_call",
]
