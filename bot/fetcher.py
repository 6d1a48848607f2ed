"""Update fetcher — one long-poll request per call.

The poller only depends on the :class:`Fetcher` protocol, so tests can swap
in a scripted fake.  :class:`UpdateFetcher` is the real implementation over
:class:`~sdk.client.TeleloopClient`; the blocking ``requests`` call runs in a
worker thread via :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

import requests
from pydantic import ValidationError

from core.logger import TeleloopLogger
from sdk.client import TeleloopClient
from sdk.exceptions import FetchError, TeleloopError
from sdk.models import Update

logger = TeleloopLogger.get_logger()


@runtime_checkable
class Fetcher(Protocol):
    """Fetch the pending updates with id >= *offset*."""

    async def fetch(self, offset: int, timeout: int) -> list[Update]: ...  # noqa: E704


class UpdateFetcher:
    """Fetch bounded batches of updates through ``getUpdates``.

    Args:
        client: Transport used for the request.
        limit: Maximum number of updates per batch (1–100).
    """

    def __init__(self, client: TeleloopClient, limit: int = 100) -> None:
        if not 1 <= limit <= 100:
            raise ValueError("limit must be between 1 and 100")
        self._client = client
        self._limit = limit

    async def fetch(self, offset: int, timeout: int) -> list[Update]:
        """Return the updates with id >= *offset*, waiting up to *timeout* seconds.

        Raises:
            FetchError: On any transport, status, envelope or decode failure.
        """
        try:
            updates = await asyncio.to_thread(
                self._client.get_updates, offset=offset, limit=self._limit, timeout=timeout,
            )
        except (requests.RequestException, TeleloopError, ValidationError, ValueError, TypeError) as exc:
            raise FetchError(offset, str(exc)) from exc

        if updates:
            logger.debug(
                "Fetched updates",
                extra={"offset": offset, "count": len(updates), "last_update_id": updates[-1].update_id},
            )
        return updates
