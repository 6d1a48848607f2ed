"""Tests for the Pydantic Bot API models."""

import sys
import os

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sdk.models import (
    Audio,
    CallbackResponse,
    Chat,
    Envelope,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InlineQueryResultArticle,
    InputTextMessageContent,
    Message,
    ParseMode,
    Photo,
    Query,
    QueryResponse,
    Recipient,
    ReplyKeyboardRemove,
    SendOptions,
    Update,
    User,
)


def _message(**fields) -> Message:
    payload = {"message_id": 10, "date": 0, "chat": {"id": 42, "type": "private"}}
    payload.update(fields)
    return Message.model_validate(payload)


# ── Identities ───────────────────────────────────────────────────────────────


class TestRecipients:
    """Users and chats are valid recipients."""

    def test_user_destination(self) -> None:
        u = User(id=42, is_bot=False, first_name="Ada")
        assert u.destination() == "42"
        assert isinstance(u, Recipient)

    def test_chat_destination(self) -> None:
        c = Chat(id=-100123, type="supergroup", title="Team")
        assert c.destination() == "-100123"
        assert c.is_group_chat()
        assert isinstance(c, Recipient)

    def test_user_requires_id(self) -> None:
        with pytest.raises(ValidationError):
            User(first_name="Nobody")


# ── Messages and updates ─────────────────────────────────────────────────────


class TestMessage:
    """Validate message decoding and helpers."""

    def test_from_alias(self) -> None:
        msg = _message(**{"from": {"id": 7, "is_bot": False, "first_name": "Ada"}})
        assert msg.from_field.id == 7
        assert msg.origin().id == 7
        assert msg.is_personal()

    def test_origin_prefers_forwarded_author(self) -> None:
        msg = _message(**{
            "from": {"id": 7, "first_name": "Ada"},
            "forward_from": {"id": 8, "first_name": "Grace"},
        })
        assert msg.is_forwarded()
        assert msg.origin().id == 8

    def test_reply_nesting(self) -> None:
        msg = _message(reply_to_message={"message_id": 9, "date": 0, "chat": {"id": 42, "type": "private"}, "text": "first"})
        assert msg.is_reply()
        assert msg.reply_to_message.text == "first"

    def test_photo_sizes(self) -> None:
        msg = _message(photo=[
            {"file_id": "small", "width": 90, "height": 90},
            {"file_id": "large", "width": 800, "height": 800},
        ])
        assert msg.photo[-1].file_id == "large"
        assert msg.photo[-1].exists()

    def test_missing_chat_raises(self) -> None:
        with pytest.raises(ValidationError):
            Message.model_validate({"message_id": 1, "date": 0})


class TestUpdate:
    """Updates ignore payload kinds they do not model."""

    def test_unknown_fields_ignored(self) -> None:
        update = Update.model_validate({"update_id": 3, "edited_message": {"message_id": 1}})
        assert update.update_id == 3
        assert update.message is None

    def test_query_payload(self) -> None:
        update = Update.model_validate({
            "update_id": 4,
            "inline_query": {"id": "q", "from": {"id": 7, "first_name": "Ada"}, "query": "cats", "offset": ""},
        })
        assert isinstance(update.inline_query, Query)
        assert update.inline_query.query == "cats"

    def test_envelope_defaults(self) -> None:
        envelope = Envelope.model_validate({})
        assert envelope.ok is False
        assert envelope.result is None


# ── Files ────────────────────────────────────────────────────────────────────


class TestFiles:
    """Local files are upload candidates until they get a file_id."""

    def test_from_disk(self, tmp_path) -> None:
        path = tmp_path / "song.mp3"
        path.write_bytes(b"ID3")
        audio = Audio.from_disk(path, title="Song")
        assert audio.local_path == str(path)
        assert audio.title == "Song"
        assert not audio.exists()

    def test_from_disk_missing(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            Photo.from_disk(tmp_path / "nope.jpg")

    def test_existing_file(self) -> None:
        photo = Photo(file_id="AgAD", caption="cat")
        assert photo.exists()
        assert photo.local_path is None


# ── Outgoing options ─────────────────────────────────────────────────────────


class TestSendOptions:
    """Validate rendering of send options into request parameters."""

    def test_empty(self) -> None:
        assert SendOptions().to_params() == {}

    def test_full(self) -> None:
        markup = InlineKeyboardMarkup(inline_keyboard=[[InlineKeyboardButton(text="Go", callback_data="go")]])
        options = SendOptions(
            reply_to=_message(),
            reply_markup=markup,
            parse_mode=ParseMode.HTML,
            disable_web_page_preview=True,
            disable_notification=True,
        )
        assert options.to_params() == {
            "reply_to_message_id": 10,
            "reply_markup": {"inline_keyboard": [[{"text": "Go", "callback_data": "go"}]]},
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
            "disable_notification": True,
        }

    def test_remove_keyboard(self) -> None:
        params = SendOptions(reply_markup=ReplyKeyboardRemove()).to_params()
        assert params == {"reply_markup": {"remove_keyboard": True}}


class TestResponses:
    """Inline and callback answers keep subclass fields when rendered."""

    def test_query_response_serializes_article(self) -> None:
        article = InlineQueryResultArticle(
            id="1",
            title="Cats",
            input_message_content=InputTextMessageContent(message_text="meow"),
        )
        params = QueryResponse(inline_query_id="q", results=[article], cache_time=0).to_params()
        assert params == {
            "inline_query_id": "q",
            "results": [{
                "type": "article",
                "id": "1",
                "title": "Cats",
                "input_message_content": {"message_text": "meow"},
            }],
            "cache_time": 0,
        }

    def test_callback_response(self) -> None:
        params = CallbackResponse(callback_query_id="c", text="done").to_params()
        assert params == {"callback_query_id": "c", "text": "done"}
