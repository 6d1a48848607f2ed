"""TeleloopLogger — Singleton JSON logger with console and rotating file output.

Provides a single, project-wide logger instance that writes structured JSON to
both stdout and ``<TELELOOP_LOG_DIR>/teleloop.log`` (with automatic rotation).
SDK modules log through ``logging.getLogger("teleloop.sdk")``, which propagates
to the same handlers.
"""

import asyncio
import json
import logging
import os
import re
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional


_TOKEN_PATTERN = re.compile(r"bot\d+:[A-Za-z0-9_-]+")
_TOKEN_MASK = "bot<token>"


def redact(text: str) -> str:
    """Mask Bot API tokens embedded in *text*, such as request URLs."""
    return _TOKEN_PATTERN.sub(_TOKEN_MASK, text)


def _current_task_name() -> Optional[str]:
    try:
        task = asyncio.current_task()
    except RuntimeError:
        return None
    return task.get_name() if task is not None else None


class _JsonFormatter(logging.Formatter):
    """Format every log record as a single-line JSON object.

    Standard fields (timestamp, level, logger, message, module, func_name)
    are always present, plus ``task`` when the record was emitted from an
    asyncio task, so lines from concurrent pollers can be told apart.  Any
    *extra* key-value pairs are merged into the object.

    The bot token is part of every request URL and shows up in transport
    error text, so string values are passed through :func:`redact`.

    Example::

        logger.error(
            "Failed to get updates",
            extra={"offset": 42, "error": "... /bot123:ABC/getUpdates ..."},
        )

    Produces::

        {"timestamp": "…", "level": "ERROR", …, "task": "teleloop-listen-7",
         "offset": 42, "error": "... /bot<token>/getUpdates ..."}
    """

    # Keys that belong to the standard LogRecord — everything else is extra.
    _BUILTIN_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None,
    ))) | {"taskName"}

    def format(self, record: logging.LogRecord) -> str:
        """Serialize *record* to a JSON string."""
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
            "module": record.module,
            "func_name": record.funcName,
        }

        task_name = _current_task_name()
        if task_name is not None:
            log_entry["task"] = task_name

        if record.exc_info:
            log_entry["exc_info"] = redact(self.formatException(record.exc_info))

        for key, value in record.__dict__.items():
            if key not in self._BUILTIN_ATTRS and key not in log_entry:
                log_entry[key] = redact(value) if isinstance(value, str) else value

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class TeleloopLogger:
    """Singleton logger with dual handlers (console + rotating file).

    Usage::

        from core.logger import TeleloopLogger

        logger = TeleloopLogger.get_logger()
        logger.info("Polling started")
    """

    _instance: Optional["TeleloopLogger"] = None
    _logger: Optional[logging.Logger] = None

    _LOGGER_NAME: str = "teleloop"
    _LOG_FILE: str = "teleloop.log"
    _MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    _BACKUP_COUNT: int = 5

    def __new__(cls, level: Optional[int] = None) -> "TeleloopLogger":
        """Ensure only one instance is ever created (Singleton)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_logger(level if level is not None else cls._env_level())
        return cls._instance

    # ------------------------------------------------------------------
    # Initialisation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _env_level() -> int:
        """Resolve ``LOG_LEVEL`` (e.g. ``"DEBUG"``), defaulting to INFO."""
        name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    def _init_logger(self, level: int) -> None:
        """Create the underlying :class:`logging.Logger` and attach handlers."""
        self._logger = logging.getLogger(self._LOGGER_NAME)
        self._logger.setLevel(level)

        # Avoid duplicate handlers if the module is reloaded.
        if self._logger.handlers:
            return

        formatter = _JsonFormatter()

        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        log_dir = os.environ.get("TELELOOP_LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, self._LOG_FILE)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=self._MAX_BYTES,
            backupCount=self._BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        self._logger.addHandler(file_handler)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def get_logger(level: Optional[int] = None) -> logging.Logger:
        """Return the shared :class:`logging.Logger` instance.

        Creates the singleton on first call; subsequent calls return the
        same logger regardless of the *level* argument.
        """
        instance = TeleloopLogger(level)
        assert instance._logger is not None  # guaranteed by __new__
        return instance._logger

    def cleanup(self) -> None:
        """Flush and close all handlers attached to the logger."""
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

    def __del__(self) -> None:
        """Best-effort cleanup on garbage collection."""
        self.cleanup()
