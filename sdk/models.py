"""Pydantic data models for the Bot API objects this library sends and receives.

Incoming objects (``Update``, ``Message``, ``Query``, ``Callback`` and the
media they carry) ignore unknown fields, so newer API additions never break
decoding.  Outgoing objects (``SendOptions``, ``QueryResponse``,
``CallbackResponse``, inline results) know how to render themselves into
request parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field, PrivateAttr, SerializeAsAny


class ParseMode:
    """Text formatting modes accepted by ``parse_mode``."""

    MARKDOWN = "Markdown"
    MARKDOWN_V2 = "MarkdownV2"
    HTML = "HTML"


class ChatAction:
    """Chat actions for :meth:`bot.facade.Bot.send_chat_action`.

    A bot's chat action lives for about five seconds, or until the bot's
    next message arrives.
    """

    TYPING = "typing"
    UPLOAD_PHOTO = "upload_photo"
    RECORD_VIDEO = "record_video"
    UPLOAD_VIDEO = "upload_video"
    RECORD_AUDIO = "record_audio"
    UPLOAD_AUDIO = "upload_audio"
    UPLOAD_DOCUMENT = "upload_document"
    FIND_LOCATION = "find_location"


@runtime_checkable
class Recipient(Protocol):
    """Anything a message can be sent to."""

    def destination(self) -> str: ...  # noqa: E704


# ── Identities ───────────────────────────────────────────────────────────────


class User(BaseModel):
    """A user or bot."""

    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None

    model_config = {"populate_by_name": True}

    def destination(self) -> str:
        return str(self.id)


class Chat(BaseModel):
    """A private chat, group, supergroup or channel."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"populate_by_name": True}

    def destination(self) -> str:
        return str(self.id)

    def is_group_chat(self) -> bool:
        return self.type != "private"


class MessageEntity(BaseModel):
    """A special entity in a text message (hashtag, command, URL, …)."""

    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional[User] = None

    model_config = {"populate_by_name": True}


# ── Files and media ──────────────────────────────────────────────────────────


class File(BaseModel):
    """A file stored on the API servers, or a local file waiting to be uploaded.

    A file with a ``file_id`` already lives on the servers and is sent by
    reference.  One built with :meth:`from_disk` has no ``file_id`` yet and
    is uploaded from its local path on first send.
    """

    file_id: Optional[str] = None
    file_unique_id: Optional[str] = None
    file_size: Optional[int] = None
    file_path: Optional[str] = None

    _local_path: Optional[str] = PrivateAttr(default=None)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_disk(cls, path: Union[str, Path], **fields: Any):
        """Build an upload candidate from a local file.

        Raises:
            FileNotFoundError: If *path* is not an existing file.
        """
        local = Path(path)
        if not local.is_file():
            raise FileNotFoundError(f"teleloop: '{path}' does not exist")
        instance = cls(**fields)
        instance._local_path = str(local)
        return instance

    @property
    def local_path(self) -> Optional[str]:
        return self._local_path

    def exists(self) -> bool:
        """Whether the file is already stored on the servers."""
        return bool(self.file_id)


class PhotoSize(File):
    """One size of a photo or thumbnail."""

    width: int = 0
    height: int = 0


class Photo(File):
    """An outgoing photo; received photos arrive as a list of :class:`PhotoSize`."""

    width: int = 0
    height: int = 0
    caption: Optional[str] = None


class Audio(File):
    duration: int = 0
    performer: Optional[str] = None
    title: Optional[str] = None
    mime_type: Optional[str] = None


class Document(File):
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    thumb: Optional[PhotoSize] = None


class Sticker(File):
    width: int = 0
    height: int = 0
    emoji: Optional[str] = None
    thumb: Optional[PhotoSize] = None


class Video(File):
    width: int = 0
    height: int = 0
    duration: int = 0
    mime_type: Optional[str] = None
    caption: Optional[str] = None
    thumb: Optional[PhotoSize] = None


class Location(BaseModel):
    latitude: float
    longitude: float

    model_config = {"populate_by_name": True}


class Venue(BaseModel):
    location: Location
    title: str
    address: str
    foursquare_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class Contact(BaseModel):
    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    user_id: Optional[int] = None

    model_config = {"populate_by_name": True}


# ── Messages and updates ─────────────────────────────────────────────────────


class Message(BaseModel):
    """A message in a chat."""

    message_id: int
    date: int
    chat: Chat
    from_field: Optional[User] = Field(None, alias="from")
    forward_from: Optional[User] = None
    forward_from_chat: Optional[Chat] = None
    forward_date: Optional[int] = None
    reply_to_message: Optional["Message"] = None
    edit_date: Optional[int] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    caption: Optional[str] = None
    audio: Optional[Audio] = None
    document: Optional[Document] = None
    photo: Optional[List[PhotoSize]] = None
    sticker: Optional[Sticker] = None
    video: Optional[Video] = None
    contact: Optional[Contact] = None
    location: Optional[Location] = None
    venue: Optional[Venue] = None
    new_chat_members: Optional[List[User]] = None
    left_chat_member: Optional[User] = None

    model_config = {"populate_by_name": True}

    def origin(self) -> Optional[User]:
        """The original sender: the forwarded author, else the sender."""
        return self.forward_from or self.from_field

    def is_forwarded(self) -> bool:
        return self.forward_from is not None or self.forward_from_chat is not None

    def is_reply(self) -> bool:
        return self.reply_to_message is not None

    def is_personal(self) -> bool:
        return not self.chat.is_group_chat()


class Query(BaseModel):
    """An incoming inline query."""

    id: str
    from_field: User = Field(..., alias="from")
    query: str = ""
    offset: str = ""
    location: Optional[Location] = None

    model_config = {"populate_by_name": True}


class Callback(BaseModel):
    """An incoming callback query from an inline keyboard button."""

    id: str
    from_field: User = Field(..., alias="from")
    chat_instance: Optional[str] = None
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None

    model_config = {"populate_by_name": True}


class Update(BaseModel):
    """An incoming update.  Exactly one payload slot is expected to be set."""

    update_id: int
    message: Optional[Message] = None
    inline_query: Optional[Query] = None
    callback_query: Optional[Callback] = None

    model_config = {"populate_by_name": True}


class Envelope(BaseModel):
    """The ``{ok, result, description}`` wrapper around every API response."""

    ok: bool = False
    result: Any = None
    description: Optional[str] = None
    error_code: Optional[int] = None

    model_config = {"populate_by_name": True}


# ── Keyboards ────────────────────────────────────────────────────────────────


class InlineKeyboardButton(BaseModel):
    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    switch_inline_query: Optional[str] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardMarkup(BaseModel):
    inline_keyboard: List[List[InlineKeyboardButton]]

    model_config = {"populate_by_name": True}


class KeyboardButton(BaseModel):
    text: str
    request_contact: Optional[bool] = None
    request_location: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardMarkup(BaseModel):
    keyboard: List[List[KeyboardButton]]
    resize_keyboard: Optional[bool] = None
    one_time_keyboard: Optional[bool] = None
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardRemove(BaseModel):
    remove_keyboard: bool = True
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ForceReply(BaseModel):
    force_reply: bool = True
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


ReplyMarkup = Union[InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, ForceReply]


class SendOptions(BaseModel):
    """Optional knobs shared by the send/edit operations."""

    reply_to: Optional[Message] = None
    reply_markup: Optional[ReplyMarkup] = None
    parse_mode: Optional[str] = None
    disable_web_page_preview: bool = False
    disable_notification: bool = False

    def to_params(self) -> Dict[str, Any]:
        """Render the options as request parameters, omitting unset ones."""
        params: Dict[str, Any] = {}
        if self.reply_to is not None:
            params["reply_to_message_id"] = self.reply_to.message_id
        if self.reply_markup is not None:
            params["reply_markup"] = self.reply_markup.model_dump(exclude_none=True)
        if self.parse_mode:
            params["parse_mode"] = self.parse_mode
        if self.disable_web_page_preview:
            params["disable_web_page_preview"] = True
        if self.disable_notification:
            params["disable_notification"] = True
        return params


# ── Inline query answers ─────────────────────────────────────────────────────


class InputTextMessageContent(BaseModel):
    message_text: str
    parse_mode: Optional[str] = None
    disable_web_page_preview: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineQueryResult(BaseModel):
    """Base for the result kinds an inline query can be answered with."""

    type: str
    id: str
    reply_markup: Optional[InlineKeyboardMarkup] = None

    model_config = {"populate_by_name": True}


class InlineQueryResultArticle(InlineQueryResult):
    type: str = "article"
    title: str
    input_message_content: InputTextMessageContent
    url: Optional[str] = None
    hide_url: Optional[bool] = None
    description: Optional[str] = None
    thumb_url: Optional[str] = None


class InlineQueryResultPhoto(InlineQueryResult):
    type: str = "photo"
    photo_url: str
    thumb_url: str
    photo_width: Optional[int] = None
    photo_height: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    caption: Optional[str] = None


class QueryResponse(BaseModel):
    """The answer to an inline query.  ``inline_query_id`` is filled in on send."""

    inline_query_id: Optional[str] = None
    results: List[SerializeAsAny[InlineQueryResult]] = Field(default_factory=list)
    cache_time: Optional[int] = None
    is_personal: Optional[bool] = None
    next_offset: Optional[str] = None
    switch_pm_text: Optional[str] = None
    switch_pm_parameter: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CallbackResponse(BaseModel):
    """The answer to a callback query.  ``callback_query_id`` is filled in on send."""

    callback_query_id: Optional[str] = None
    text: Optional[str] = None
    show_alert: Optional[bool] = None
    url: Optional[str] = None
    cache_time: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
