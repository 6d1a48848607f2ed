"""TeleloopClient -- the HTTP transport every Bot API call goes through.

Two primitives carry everything: :meth:`TeleloopClient.send_command` posts a
named command with JSON parameters and returns the raw decoded body, and
:meth:`TeleloopClient.send_file` does the same as a multipart upload.
:meth:`~TeleloopClient.get_updates` and :meth:`~TeleloopClient.get_me` sit on
top and return Pydantic models.  HTTP calls use the ``requests`` library and
are blocking; async callers offload them with :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from sdk.exceptions import APIException, ResponseError
from sdk.models import Envelope, Update, User

_sdk_logger = logging.getLogger("teleloop.sdk")


class TeleloopClient:
    """Client-side transport for the Bot API.

    Non-2xx status codes raise :class:`APIException`; transport failures
    propagate as :class:`requests.RequestException`.  The typed helpers
    additionally raise :class:`ResponseError` for ``ok: false`` envelopes.
    """

    _DEFAULT_TIMEOUT: int = 10
    _UPLOAD_TIMEOUT: int = 120

    def __init__(self, base_url: str, timeout: int = _DEFAULT_TIMEOUT) -> None:
        """Create a new client bound to *base_url*.

        Args:
            base_url: Full Bot API base URL (e.g. ``https://api.telegram.org/bot<token>``).
            timeout: Default request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _url(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    @staticmethod
    def _decode(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok:
            raise APIException(response.status_code, body if isinstance(body, dict) else {})
        return body

    def _post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Send a POST request and return the parsed JSON body.

        Raises:
            APIException: If the response status code is not 2xx.
            requests.RequestException: On transport-level failures.
        """
        _sdk_logger.debug("Bot API call", extra={"api_endpoint": endpoint})
        response = requests.post(
            self._url(endpoint),
            json=payload,
            timeout=timeout if timeout is not None else self._timeout,
        )
        return self._decode(response)

    @staticmethod
    def unwrap(body: Dict[str, Any]) -> Envelope:
        """Validate the ``{ok, result, description}`` envelope.

        Raises:
            ResponseError: If ``ok`` is false.
            pydantic.ValidationError: If *body* is not an envelope at all.
        """
        envelope = Envelope.model_validate(body)
        if not envelope.ok:
            raise ResponseError(envelope.description, envelope.error_code)
        return envelope

    # ------------------------------------------------------------------
    #  Transport primitives
    # ------------------------------------------------------------------

    def send_command(self, command: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Submit the remote *command* with *params* and return the raw body."""
        return self._post(command, params or {})

    def send_file(self, command: str, field: str, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Upload the local file at *path* as *field* alongside *params*.

        Non-string parameter values are JSON-encoded, as multipart form
        fields only carry strings.

        Raises:
            OSError: If *path* cannot be opened.
            APIException: If the response status code is not 2xx.
            requests.RequestException: On transport-level failures.
        """
        data = {
            key: value if isinstance(value, str) else json.dumps(value)
            for key, value in (params or {}).items()
        }
        _sdk_logger.debug("Bot API upload", extra={"api_endpoint": command, "field": field, "path": path})
        with open(path, "rb") as handle:
            response = requests.post(
                self._url(command),
                data=data,
                files={field: (os.path.basename(path), handle)},
                timeout=self._UPLOAD_TIMEOUT,
            )
        return self._decode(response)

    # ------------------------------------------------------------------
    #  Typed endpoints
    # ------------------------------------------------------------------

    def get_updates(self, offset: Optional[int] = None, limit: Optional[int] = 100, timeout: int = 0) -> List[Update]:
        """Long-poll for updates with id >= *offset*.

        The server may hold the request open for *timeout* seconds, so the
        HTTP timeout is stretched by the same amount.
        """
        payload: Dict[str, Any] = {"timeout": timeout}
        if offset is not None:
            payload["offset"] = offset
        if limit is not None:
            payload["limit"] = limit
        body = self._post("getUpdates", payload, timeout=timeout + self._timeout)
        envelope = self.unwrap(body)
        if envelope.result is None:
            return []
        if not isinstance(envelope.result, list):
            raise ResponseError(f"getUpdates result is {type(envelope.result).__name__}, not a list")
        return [Update.model_validate(item) for item in envelope.result]

    def get_me(self) -> User:
        """Return the bot's own identity; fails on a bad token."""
        envelope = self.unwrap(self._post("getMe"))
        return User.model_validate(envelope.result)
