"""Bot API SDK — Pydantic models, HTTP transport client, and exceptions.

Usage::

    from sdk import TeleloopClient, APIException
    from sdk.models import User, Message, Update
"""

from sdk.client import TeleloopClient
from sdk.exceptions import APIException, FetchError, ResponseError, TeleloopError

__all__ = [
    "TeleloopClient",
    "TeleloopError",
    "APIException",
    "ResponseError",
    "FetchError",
]
