"""Core services — logging, retry backoff, and cursor persistence.

This package is framework-agnostic. It must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.backoff import Backoff, ExponentialBackoff, ImmediateRetry
from core.cursor import CursorStateError, CursorStore, JsonCursorStore, MemoryCursorStore
from core.logger import TeleloopLogger

__all__ = [
    "TeleloopLogger",
    "Backoff",
    "ImmediateRetry",
    "ExponentialBackoff",
    "CursorStore",
    "CursorStateError",
    "MemoryCursorStore",
    "JsonCursorStore",
]
