"""Bot facade — identity check, polling entry points and outbound operations.

Construction verifies the token with a synchronous ``getMe`` call and fails
fast.  :meth:`Bot.listen` and :meth:`Bot.start` wire a :class:`~bot.poller.Poller`
to output queues; every other public coroutine performs exactly one remote
call, decodes the ``{ok, result, description}`` envelope and raises
:class:`~sdk.exceptions.ResponseError` when ``ok`` is false.  Outbound calls
are never retried.
"""

from __future__ import annotations

import asyncio
import warnings
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Union

from bot.fetcher import UpdateFetcher
from bot.poller import Poller
from core.backoff import Backoff, ExponentialBackoff, ImmediateRetry
from core.cursor import CursorStore, JsonCursorStore
from core.logger import TeleloopLogger
from sdk.client import TeleloopClient
from sdk.exceptions import ResponseError
from sdk.models import (
    Audio,
    Callback,
    CallbackResponse,
    Document,
    Envelope,
    File,
    InlineQueryResult,
    Location,
    Message,
    Photo,
    Query,
    QueryResponse,
    Recipient,
    SendOptions,
    Sticker,
    User,
    Venue,
    Video,
)

logger = TeleloopLogger.get_logger()

DEFAULT_API_URL = "https://api.telegram.org"

Destination = Union[Recipient, int, str]
Timeout = Union[int, float, timedelta]


def _destination(recipient: Destination) -> str:
    if isinstance(recipient, (int, str)):
        return str(recipient)
    return recipient.destination()


def _with_options(params: Dict[str, Any], options: Optional[SendOptions]) -> Dict[str, Any]:
    if options is not None:
        params.update(options.to_params())
    return params


def _alias(target: File, source: Optional[File]) -> None:
    """Point *target* at its server-side copy *source*, keeping local-only data."""
    if source is None:
        return
    target_fields = type(target).model_fields
    for name in type(source).model_fields:
        value = getattr(source, name)
        if name in target_fields and value is not None:
            setattr(target, name, value)


class Bot:
    """A bot instance bound to one secret token.

    Args:
        token: Secret API token assigned to the bot.
        api_url: Bot API root, without the ``/bot<token>`` suffix.
        request_timeout: Default HTTP timeout in seconds.
        client: Pre-built transport; overrides *api_url*/*request_timeout*.
        backoff_factory: Builds the retry strategy for each new poller.
        cursor_store: Cursor persistence shared by the pollers of this bot.
        messages, queries, callbacks: Output queues used by :meth:`start`;
            ``None`` means the category is not wanted.

    Raises:
        ValueError: If *token* is empty.
        APIException, ResponseError, requests.RequestException: If the
            identity check fails.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        request_timeout: int = 10,
        client: Optional[TeleloopClient] = None,
        backoff_factory: Optional[Callable[[], Backoff]] = None,
        cursor_store: Optional[CursorStore] = None,
        messages: Optional[asyncio.Queue] = None,
        queries: Optional[asyncio.Queue] = None,
        callbacks: Optional[asyncio.Queue] = None,
    ) -> None:
        if not token:
            raise ValueError("token must be a non-empty string")
        self.token = token
        self._client = client or TeleloopClient(f"{api_url.rstrip('/')}/bot{token}", timeout=request_timeout)
        self._identity = self._client.get_me()
        logger.info(
            "Bot identity verified",
            extra={"bot_id": self._identity.id, "username": self._identity.username},
        )

        self.messages = messages
        self.queries = queries
        self.callbacks = callbacks
        self._backoff_factory = backoff_factory or ImmediateRetry
        self._cursor_store = cursor_store
        self._pollers: List[Poller] = []

    @classmethod
    def from_env(cls, **kwargs: Any) -> "Bot":
        """Build a bot from the values resolved in :mod:`config`.

        Raises:
            EnvironmentError: If ``BOT_TOKEN`` is not set.
        """
        import config  # deferred so importing the SDK never reads the environment

        if not config.BOT_TOKEN:
            raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

        kwargs.setdefault("api_url", config.API_URL)
        kwargs.setdefault("request_timeout", config.REQUEST_TIMEOUT)
        kwargs.setdefault(
            "backoff_factory",
            lambda: ExponentialBackoff(config.RETRY_BACKOFF_INITIAL, maximum=config.RETRY_BACKOFF_MAX),
        )
        if config.CURSOR_STATE_PATH:
            kwargs.setdefault("cursor_store", JsonCursorStore(config.CURSOR_STATE_PATH))
        return cls(config.BOT_TOKEN, **kwargs)

    @property
    def identity(self) -> User:
        """The bot's own user, resolved once at construction."""
        return self._identity

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _new_poller(self, timeout: Timeout, **channels: Optional[asyncio.Queue]) -> Poller:
        poller = Poller(
            UpdateFetcher(self._client),
            timeout=timeout,
            backoff=self._backoff_factory(),
            cursor_store=self._cursor_store,
            **channels,
        )
        self._pollers.append(poller)
        return poller

    def listen(self, subscription: asyncio.Queue, timeout: Timeout) -> asyncio.Task:
        """Deliver new messages to *subscription* from a background task.

        Inline queries and callbacks are not wanted by this poller and are
        dropped.  Must be called with an event loop running; returns at once.
        """
        poller = self._new_poller(timeout, messages=subscription)
        task = asyncio.create_task(poller.run(), name=f"teleloop-listen-{self._identity.id}")
        task.add_done_callback(lambda _: self._forget(poller))
        return task

    async def start(self, timeout: Timeout) -> None:
        """Poll into :attr:`messages`, :attr:`queries` and :attr:`callbacks`.

        Runs on the calling task and returns only after :meth:`stop`.
        """
        poller = self._new_poller(
            timeout,
            messages=self.messages,
            queries=self.queries,
            callbacks=self.callbacks,
        )
        try:
            await poller.run()
        finally:
            self._forget(poller)

    def stop(self) -> None:
        """Stop every poller started by this bot.

        A long poll already in flight keeps its worker thread busy until the
        HTTP request returns, at most the poll timeout plus the request
        timeout.  ``asyncio.run`` waits for that thread before exiting.
        """
        for poller in self._pollers:
            poller.stop()
        self._pollers.clear()

    def _forget(self, poller: Poller) -> None:
        if poller in self._pollers:
            self._pollers.remove(poller)

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    async def _call(self, command: str, params: Dict[str, Any], upload: Optional[tuple[str, str]] = None) -> Envelope:
        if upload is None:
            body = await asyncio.to_thread(self._client.send_command, command, params)
        else:
            field, path = upload
            body = await asyncio.to_thread(self._client.send_file, command, field, path, params)
        try:
            return self._client.unwrap(body)
        except ResponseError as exc:
            logger.warning("Bot API returned an error", extra={"api_endpoint": command, "error": exc.description})
            raise

    async def _send_raw_message(self, command: str, params: Dict[str, Any]) -> Message:
        envelope = await self._call(command, params)
        return Message.model_validate(envelope.result)

    async def _send_media(
        self,
        command: str,
        field: str,
        recipient: Destination,
        media: File,
        params: Dict[str, Any],
        options: Optional[SendOptions],
    ) -> Message:
        params = _with_options({"chat_id": _destination(recipient), **params}, options)
        if media.exists():
            params[field] = media.file_id
            envelope = await self._call(command, params)
        elif media.local_path is not None:
            envelope = await self._call(command, params, upload=(field, media.local_path))
        else:
            raise ValueError(f"teleloop: {field} has neither a file_id nor a local path")
        return Message.model_validate(envelope.result)

    async def send_message(self, recipient: Destination, text: str, options: Optional[SendOptions] = None) -> Message:
        """Send a text message to *recipient*."""
        params = _with_options({"chat_id": _destination(recipient), "text": text}, options)
        return await self._send_raw_message("sendMessage", params)

    async def forward_message(self, recipient: Destination, message: Message) -> Message:
        """Forward *message* to *recipient*."""
        params = {
            "chat_id": _destination(recipient),
            "from_chat_id": message.chat.destination(),
            "message_id": message.message_id,
        }
        return await self._send_raw_message("forwardMessage", params)

    async def edit_message_text(self, message: Message, text: str, options: Optional[SendOptions] = None) -> Message:
        """Replace the text of a message previously sent by the bot."""
        params = _with_options(
            {"chat_id": message.chat.destination(), "message_id": message.message_id, "text": text},
            options,
        )
        return await self._send_raw_message("editMessageText", params)

    async def edit_inline_message_text(self, inline_message_id: str, text: str, options: Optional[SendOptions] = None) -> None:
        """Replace the text of a message sent via inline mode."""
        params = _with_options({"inline_message_id": inline_message_id, "text": text}, options)
        await self._call("editMessageText", params)

    async def send_photo(self, recipient: Destination, photo: Photo, options: Optional[SendOptions] = None) -> Message:
        """Send *photo*, uploading it first if it is not on the servers yet.

        On success *photo* is re-aliased to its largest server-side size, so
        sending the same object again reuses the stored file.
        """
        params: Dict[str, Any] = {}
        if photo.caption:
            params["caption"] = photo.caption
        message = await self._send_media("sendPhoto", "photo", recipient, photo, params, options)
        if message.photo:
            _alias(photo, message.photo[-1])
        return message

    async def send_audio(self, recipient: Destination, audio: Audio, options: Optional[SendOptions] = None) -> Message:
        """Send *audio*; on success it is re-aliased to the server-side copy."""
        message = await self._send_media("sendAudio", "audio", recipient, audio, {}, options)
        _alias(audio, message.audio)
        return message

    async def send_document(self, recipient: Destination, document: Document, options: Optional[SendOptions] = None) -> Message:
        """Send *document*; on success it is re-aliased to the server-side copy."""
        message = await self._send_media("sendDocument", "document", recipient, document, {}, options)
        _alias(document, message.document)
        return message

    async def send_sticker(self, recipient: Destination, sticker: Sticker, options: Optional[SendOptions] = None) -> Message:
        """Send *sticker*; on success it is re-aliased to the server-side copy."""
        message = await self._send_media("sendSticker", "sticker", recipient, sticker, {}, options)
        _alias(sticker, message.sticker)
        return message

    async def send_video(self, recipient: Destination, video: Video, options: Optional[SendOptions] = None) -> Message:
        """Send *video*; on success it is re-aliased to the server-side copy."""
        params: Dict[str, Any] = {}
        if video.caption:
            params["caption"] = video.caption
        message = await self._send_media("sendVideo", "video", recipient, video, params, options)
        _alias(video, message.video)
        return message

    async def send_location(self, recipient: Destination, location: Location, options: Optional[SendOptions] = None) -> Message:
        params = _with_options(
            {
                "chat_id": _destination(recipient),
                "latitude": location.latitude,
                "longitude": location.longitude,
            },
            options,
        )
        return await self._send_raw_message("sendLocation", params)

    async def send_venue(self, recipient: Destination, venue: Venue, options: Optional[SendOptions] = None) -> Message:
        params: Dict[str, Any] = {
            "chat_id": _destination(recipient),
            "latitude": venue.location.latitude,
            "longitude": venue.location.longitude,
            "title": venue.title,
            "address": venue.address,
        }
        if venue.foursquare_id:
            params["foursquare_id"] = venue.foursquare_id
        return await self._send_raw_message("sendVenue", _with_options(params, options))

    async def send_chat_action(self, recipient: Destination, action: str) -> None:
        """Show a short-lived status such as "typing" to *recipient*.

        See :class:`~sdk.models.ChatAction` for the supported values.
        """
        await self._call("sendChatAction", {"chat_id": _destination(recipient), "action": action})

    async def respond(self, query: Query, results: List[InlineQueryResult]) -> None:
        """Publish *results* for an inline query.

        .. deprecated:: use :meth:`answer_inline_query`.
        """
        warnings.warn("Bot.respond is deprecated, use Bot.answer_inline_query", DeprecationWarning, stacklevel=2)
        await self.answer_inline_query(query, QueryResponse(results=results))

    async def answer_inline_query(self, query: Query, response: QueryResponse) -> None:
        """Answer an inline query.  A query can only be answered once."""
        response.inline_query_id = query.id
        await self._call("answerInlineQuery", response.to_params())

    async def answer_callback_query(self, callback: Callback, response: Optional[CallbackResponse] = None) -> None:
        """Answer a callback query.  A callback can only be answered once."""
        response = response or CallbackResponse()
        response.callback_query_id = callback.id
        await self._call("answerCallbackQuery", response.to_params())
