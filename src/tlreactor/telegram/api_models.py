"""Msgspec models for the Bot API payloads consumed by the poll engine."""

from __future__ import annotations

from dataclasses import dataclass

import msgspec

__all__ = [
    "BOT_COMMAND_ENTITY",
    "BotCommand",
    "Chat",
    "ChatMember",
    "Message",
    "MessageEntity",
    "PhotoSize",
    "Sticker",
    "Update",
    "User",
    "Video",
]

BOT_COMMAND_ENTITY = "bot_command"


class User(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    id: int
    is_bot: bool
    first_name: str
    last_name: str | None = None
    username: str | None = None


class Chat(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    id: int
    type: str
    title: str | None = None
    user_name: str | None = msgspec.field(default=None, name="username")
    first_name: str | None = None
    last_name: str | None = None


class MessageEntity(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    type: str
    offset: int
    length: int
    user: User | None = None
    url: str | None = None

    @property
    def is_bot_command(self) -> bool:
        return self.type == BOT_COMMAND_ENTITY


class PhotoSize(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    width: int
    height: int
    file_size: int | None = None


class Sticker(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    width: int
    height: int
    is_animated: bool
    emoji: str | None = None
    set_name: str | None = None


class Video(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    file_id: str
    width: int
    height: int
    duration: int
    thumb: PhotoSize | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Message(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    message_id: int
    date: int
    chat: Chat
    from_: User | None = msgspec.field(default=None, name="from")
    forward_from: User | None = None
    reply_to_message: Message | None = None
    text: str | None = None
    entities: list[MessageEntity] | None = None
    sticker: Sticker | None = None
    new_chat_members: list[User] | None = None
    left_chat_member: User | None = None


class ChatMember(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    user: User
    status: str
    until_date: int | None = None
    can_be_edited: bool | None = None
    can_post_messages: bool | None = None
    can_edit_messages: bool | None = None
    can_delete_messages: bool | None = None
    can_restrict_members: bool | None = None
    can_promote_members: bool | None = None
    can_change_info: bool | None = None
    can_invite_users: bool | None = None
    can_pin_messages: bool | None = None
    is_member: bool | None = None
    can_send_messages: bool | None = None
    can_send_media_messages: bool | None = None
    can_send_polls: bool | None = None
    can_send_other_messages: bool | None = None
    can_add_web_page_previews: bool | None = None


class Update(msgspec.Struct, frozen=True, forbid_unknown_fields=False):
    update_id: int
    message: Message | None = None
    edited_message: Message | None = None


@dataclass(frozen=True, slots=True)
class BotCommand:
    """A ``bot_command`` entity resolved against its message text."""

    command: str
    offset: int
    length: int
