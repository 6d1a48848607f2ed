"""Cursor persistence for the polling loop.

The cursor is the id of the last routed update.  A poller loads it once when
it starts and checkpoints it after every batch.  :class:`MemoryCursorStore`
keeps it in-process (a restart begins again at 0); :class:`JsonCursorStore`
writes it to a small JSON file with an atomic replace.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from core.logger import TeleloopLogger

logger = TeleloopLogger.get_logger()


class CursorStateError(Exception):
    """Raised when a cursor store cannot load or save its state."""

    def __init__(self, *, kind: str, detail: str) -> None:
        self.kind = str(kind).strip() or "state-error"
        self.detail = str(detail).strip() or "unknown"
        super().__init__(f"{self.kind}: {self.detail}")


@runtime_checkable
class CursorStore(Protocol):
    """Load/save contract for a poller's cursor."""

    def load(self) -> int: ...  # noqa: E704

    def save(self, cursor: int) -> None: ...  # noqa: E704


def _validate(raw: Any, kind: str) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise CursorStateError(kind=kind, detail="cursor must be an integer") from exc
    if value < 0:
        raise CursorStateError(kind=kind, detail="cursor must be >= 0")
    return value


class MemoryCursorStore:
    """Process-local cursor; nothing survives a restart."""

    def __init__(self, initial: int = 0) -> None:
        self._cursor = _validate(initial, "state-init")

    def load(self) -> int:
        return self._cursor

    def save(self, cursor: int) -> None:
        self._cursor = _validate(cursor, "state-save")


class JsonCursorStore:
    """Durable cursor kept in a JSON file (``{"version": 1, "cursor": N}``)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> int:
        """Return the stored cursor, or 0 when the file does not exist yet.

        Raises:
            CursorStateError: If the file is unreadable or malformed.
        """
        if not self._path.exists():
            logger.info("No cursor state file, starting from 0", extra={"cursor_path": str(self._path)})
            return 0

        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CursorStateError(kind="state-load-io", detail=str(exc)) from exc
        except json.JSONDecodeError as exc:
            raise CursorStateError(kind="state-load-json", detail=str(exc)) from exc

        if not isinstance(payload, dict):
            raise CursorStateError(kind="state-load-shape", detail="state root must be an object")

        cursor = _validate(payload.get("cursor", 0), "state-load-cursor")
        logger.info("Cursor state loaded", extra={"cursor_path": str(self._path), "cursor": cursor})
        return cursor

    def save(self, cursor: int) -> None:
        """Atomically replace the state file with *cursor*.

        Raises:
            CursorStateError: On invalid values or I/O failure.
        """
        value = _validate(cursor, "state-save-cursor")
        payload: dict[str, Any] = {"version": 1, "cursor": value}

        temp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(payload, sort_keys=True), encoding="utf-8")
            temp_path.replace(self._path)
        except OSError as exc:
            raise CursorStateError(kind="state-save-io", detail=str(exc)) from exc
