"""Retry delay strategies for the polling loop.

A :class:`Backoff` is consulted after every failed fetch and reset after
every successful one.  :class:`ImmediateRetry` retries with no delay at all;
:class:`ExponentialBackoff` doubles (by default) up to a cap.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Stateful delay schedule owned by a single poller."""

    def next_delay(self) -> float: ...  # noqa: E704

    def reset(self) -> None: ...  # noqa: E704


class ImmediateRetry:
    """Retry at once, forever."""

    def next_delay(self) -> float:
        return 0.0

    def reset(self) -> None:
        return None


class ExponentialBackoff:
    """Exponential delays: ``initial``, ``initial * factor``, … capped at ``maximum``.

    Args:
        initial: First delay in seconds.  ``0`` degrades to immediate retry.
        factor: Multiplier applied after each failure.
        maximum: Upper bound for any single delay.
    """

    def __init__(self, initial: float = 0.5, factor: float = 2.0, maximum: float = 30.0) -> None:
        if initial < 0:
            raise ValueError("initial must be >= 0")
        if factor < 1:
            raise ValueError("factor must be >= 1")
        if maximum < initial:
            raise ValueError("maximum must be >= initial")
        self.initial = float(initial)
        self.factor = float(factor)
        self.maximum = float(maximum)
        self._attempts = 0

    @property
    def attempts(self) -> int:
        """Number of delays handed out since the last reset."""
        return self._attempts

    def next_delay(self) -> float:
        delay = min(self.initial * (self.factor ** self._attempts), self.maximum)
        # Stop growing the exponent once capped so it never overflows.
        if delay < self.maximum:
            self._attempts += 1
        return delay

    def reset(self) -> None:
        self._attempts = 0
