"""Decoding of Bot API JSON documents into the entity model.

Every entry point accepts raw bytes, a JSON string or already-parsed
builtins. Failure envelopes (``{"ok": false, ...}``) are detected before any
entity is built, at any depth of the payload, and are turned into the
classified fault from :mod:`.errors`. Missing required fields and type
mismatches raise :class:`MalformedResponse`; optional fields that are absent
stay ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

import msgspec

from .api_models import (
    Chat,
    ChatMember,
    Message,
    MessageEntity,
    PhotoSize,
    Sticker,
    Update,
    User,
    Video,
)
from .errors import MalformedResponse, raise_for_envelope, raise_for_failure

__all__ = [
    "decode_chat",
    "decode_chat_member",
    "decode_message",
    "decode_message_entity",
    "decode_photo_size",
    "decode_sticker",
    "decode_update",
    "decode_update_batch",
    "decode_user",
    "decode_video",
    "load_json",
    "unwrap_result",
]

T = TypeVar("T")

_JSON_DECODER = msgspec.json.Decoder()


def load_json(payload: bytes | str | Any) -> Any:
    if isinstance(payload, (bytes, bytearray, memoryview, str)):
        try:
            return _JSON_DECODER.decode(payload)
        except msgspec.DecodeError as exc:
            raise MalformedResponse(f"invalid JSON: {exc}") from exc
    return payload


def _check_failures(payload: Any) -> None:
    stack = [payload]
    while stack:
        item = stack.pop()
        if isinstance(item, Mapping):
            raise_for_envelope(item)
            stack.extend(item.values())
        elif isinstance(item, list):
            stack.extend(item)


def _decode(payload: Any, kind: type[T]) -> T:
    data = load_json(payload)
    _check_failures(data)
    try:
        return msgspec.convert(data, type=kind)
    except msgspec.ValidationError as exc:
        raise MalformedResponse(str(exc)) from exc


def unwrap_result(envelope: Any) -> Any:
    """Return ``result`` of an ``ok`` envelope or raise the classified fault."""
    data = load_json(envelope)
    if not isinstance(data, Mapping):
        raise MalformedResponse(
            f"expected an envelope object, got {type(data).__name__}"
        )
    ok = data.get("ok")
    if ok is False:
        raise_for_failure(data)
    if ok is not True:
        raise MalformedResponse("envelope is missing a boolean `ok`")
    if "result" not in data:
        raise MalformedResponse("envelope is missing `result`")
    return data["result"]


def decode_update_batch(payload: Any) -> list[Update]:
    data = load_json(payload)
    if isinstance(data, Mapping) and "ok" in data:
        data = unwrap_result(data)
    if not isinstance(data, list):
        raise MalformedResponse(
            f"expected a list of updates, got {type(data).__name__}"
        )
    return _decode(data, list[Update])


def decode_update(payload: Any) -> Update:
    return _decode(payload, Update)


def decode_message(payload: Any) -> Message:
    return _decode(payload, Message)


def decode_message_entity(payload: Any) -> MessageEntity:
    return _decode(payload, MessageEntity)


def decode_chat(payload: Any) -> Chat:
    return _decode(payload, Chat)


def decode_user(payload: Any) -> User:
    return _decode(payload, User)


def decode_sticker(payload: Any) -> Sticker:
    return _decode(payload, Sticker)


def decode_photo_size(payload: Any) -> PhotoSize:
    return _decode(payload, PhotoSize)


def decode_video(payload: Any) -> Video:
    return _decode(payload, Video)


def decode_chat_member(payload: Any) -> ChatMember:
    return _decode(payload, ChatMember)
