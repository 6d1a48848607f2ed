"""Bot layer — update fetching, the polling loop, routing, and the Bot facade.

This package may import from ``core/``, ``sdk/`` and ``config`` only.
"""

from bot.facade import Bot
from bot.fetcher import Fetcher, UpdateFetcher
from bot.poller import Poller, PollerState
from bot.routing import RoutedUpdate, UpdateKind, classify

__all__ = [
    # Facade
    "Bot",
    # Polling
    "Poller",
    "PollerState",
    "Fetcher",
    "UpdateFetcher",
    # Routing
    "UpdateKind",
    "RoutedUpdate",
    "classify",
]
