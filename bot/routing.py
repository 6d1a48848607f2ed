"""Update classification — which single payload an update carries.

An :class:`~sdk.models.Update` has three optional payload slots.  The poller
never inspects them directly; it asks :func:`classify` for a
:class:`RoutedUpdate` whose :class:`UpdateKind` names the output channel.
Updates with no payload, or with more than one, are ``UNRECOGNIZED``.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Union

from sdk.models import Callback, Message, Query, Update

Payload = Union[Message, Query, Callback]


class UpdateKind(enum.Enum):
    MESSAGE = "message"
    QUERY = "inline_query"
    CALLBACK = "callback_query"
    UNRECOGNIZED = "unrecognized"


@dataclasses.dataclass(frozen=True, slots=True)
class RoutedUpdate:
    """An update reduced to its id, its kind and its one payload."""

    update_id: int
    kind: UpdateKind
    payload: Payload | None = None


# Slot name on Update → kind, in the order slots are checked.
_SLOTS: tuple[tuple[str, UpdateKind], ...] = (
    ("message", UpdateKind.MESSAGE),
    ("inline_query", UpdateKind.QUERY),
    ("callback_query", UpdateKind.CALLBACK),
)


def classify(update: Update) -> RoutedUpdate:
    """Return the routed form of *update*.

    Exactly one populated slot yields that slot's kind and payload; anything
    else yields ``UNRECOGNIZED`` with no payload.
    """
    populated = [
        (kind, getattr(update, slot))
        for slot, kind in _SLOTS
        if getattr(update, slot) is not None
    ]
    if len(populated) != 1:
        return RoutedUpdate(update_id=update.update_id, kind=UpdateKind.UNRECOGNIZED)
    kind, payload = populated[0]
    return RoutedUpdate(update_id=update.update_id, kind=kind, payload=payload)
