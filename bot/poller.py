"""Long-polling loop that distributes updates to typed output queues.

One :class:`Poller` owns one cursor (the id of the last routed update) and
cycles ``IDLE → FETCHING → ROUTING`` until stopped:

1. fetch the updates newer than the cursor (``offset = cursor + 1``);
2. on :class:`~sdk.exceptions.FetchError`, log it, wait whatever the backoff
   strategy says and retry the same cursor;
3. route every update of the batch, in order, to the queue of its kind and
   advance the cursor past it, whether it was delivered, dropped because no
   queue is wired for its kind, or skipped as unrecognized.

Delivery is ``await queue.put(...)``, so a full bounded queue stalls the
whole loop, including updates bound for the other queues.  Updates are never
fetched twice by one poller, but an update whose queue is unset is lost.
"""

from __future__ import annotations

import asyncio
import enum
from datetime import timedelta
from typing import Any, Awaitable, Optional, Union

from bot.fetcher import Fetcher
from bot.routing import UpdateKind, classify
from core.backoff import Backoff, ImmediateRetry
from core.cursor import CursorStateError, CursorStore, MemoryCursorStore
from core.logger import TeleloopLogger
from sdk.exceptions import FetchError
from sdk.models import Update

logger = TeleloopLogger.get_logger()


class PollerState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ROUTING = "routing"


def _seconds(timeout: Union[int, float, timedelta]) -> int:
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout < 0:
        raise ValueError("timeout must be >= 0")
    return int(timeout)


class Poller:
    """Fetch → route loop for one set of output queues.

    Args:
        fetcher: Source of update batches.
        messages: Queue for :class:`~sdk.models.Message` payloads, or ``None``.
        queries: Queue for :class:`~sdk.models.Query` payloads, or ``None``.
        callbacks: Queue for :class:`~sdk.models.Callback` payloads, or ``None``.
        timeout: Long-poll timeout in seconds (or a :class:`~datetime.timedelta`).
        backoff: Delay strategy after failed fetches; immediate retry by default.
        cursor_store: Where the cursor is loaded from and checkpointed to.
        stop_event: Stop token; one is created when omitted.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        messages: Optional[asyncio.Queue] = None,
        queries: Optional[asyncio.Queue] = None,
        callbacks: Optional[asyncio.Queue] = None,
        timeout: Union[int, float, timedelta] = 30,
        backoff: Optional[Backoff] = None,
        cursor_store: Optional[CursorStore] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self._fetcher = fetcher
        self._channels: dict[UpdateKind, Optional[asyncio.Queue]] = {
            UpdateKind.MESSAGE: messages,
            UpdateKind.QUERY: queries,
            UpdateKind.CALLBACK: callbacks,
        }
        self._timeout = _seconds(timeout)
        self._backoff = backoff or ImmediateRetry()
        self._store = cursor_store or MemoryCursorStore()
        self._stop = stop_event or asyncio.Event()
        self._cursor = 0
        self._saved_cursor = 0
        self.state = PollerState.IDLE
        self.dropped = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> int:
        """Id of the last routed update (0 before any)."""
        return self._cursor

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Ask the loop to stop at the next cycle boundary or blocked wait."""
        self._stop.set()

    async def run(self) -> None:
        """Poll until :meth:`stop` is called or the task is cancelled."""
        self._cursor = self._saved_cursor = self._store.load()
        logger.info("Polling started", extra={"cursor": self._cursor, "timeout": self._timeout})
        try:
            while not self._stop.is_set():
                await self.poll_once()
        finally:
            self.state = PollerState.IDLE
            self._checkpoint()
            logger.info("Polling stopped", extra={"cursor": self._cursor, "dropped": self.dropped})

    async def poll_once(self) -> None:
        """Run a single fetch and route cycle."""
        self.state = PollerState.FETCHING
        offset = self._cursor + 1
        try:
            completed, updates = await self._until_stopped(self._fetcher.fetch(offset, self._timeout))
        except FetchError as exc:
            delay = self._backoff.next_delay()
            logger.error(
                "Failed to get updates",
                extra={"offset": offset, "error": str(exc), "retry_in": delay},
            )
            self.state = PollerState.IDLE
            if delay > 0:
                await self._until_stopped(asyncio.sleep(delay))
            return

        if not completed:
            self.state = PollerState.IDLE
            return

        self._backoff.reset()
        self.state = PollerState.ROUTING
        for update in updates:
            if self._stop.is_set() or not await self._route(update):
                break
        self.state = PollerState.IDLE
        self._checkpoint()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _route(self, update: Update) -> bool:
        """Deliver *update* and advance the cursor.

        Returns ``False`` only when a stop interrupted a blocked delivery, in
        which case the cursor stays before this update.
        """
        routed = classify(update)
        if routed.kind is UpdateKind.UNRECOGNIZED:
            logger.warning("Update has no recognized payload, skipping", extra={"update_id": routed.update_id})
        else:
            channel = self._channels[routed.kind]
            if channel is None:
                self.dropped += 1
                logger.debug(
                    "No channel for update kind, dropping",
                    extra={"update_id": routed.update_id, "kind": routed.kind.value},
                )
            else:
                delivered, _ = await self._until_stopped(channel.put(routed.payload))
                if not delivered:
                    return False

        if routed.update_id > self._cursor:
            self._cursor = routed.update_id
        return True

    async def _until_stopped(self, awaitable: Awaitable[Any]) -> tuple[bool, Any]:
        """Await *awaitable* unless the stop token fires first.

        Returns ``(True, result)`` when it completed (exceptions propagate)
        and ``(False, None)`` when the stop won and it was cancelled.
        """
        task = asyncio.ensure_future(awaitable)
        if self._stop.is_set():
            task.cancel()
            return False, None

        stopper = asyncio.ensure_future(self._stop.wait())
        try:
            done, _ = await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return True, task.result()
        return False, None

    def _checkpoint(self) -> None:
        if self._cursor == self._saved_cursor:
            return
        try:
            self._store.save(self._cursor)
        except CursorStateError as exc:
            logger.error("Failed to checkpoint cursor", extra={"cursor": self._cursor, "error": str(exc)})
            return
        self._saved_cursor = self._cursor
