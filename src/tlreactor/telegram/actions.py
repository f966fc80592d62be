"""Deferred outbound calls and the FIFO queue they wait in until a flush."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from ..logging import get_logger
from .api_models import Chat, Message
from .client import BotTransport
from .codec import unwrap_result

logger = get_logger(__name__)

VIDEO_FIELD = "video"
VIDEO_CONTENT_TYPE = "video/mpeg"


@dataclass(frozen=True, slots=True)
class SendMessage:
    chat: Chat
    text: str


@dataclass(frozen=True, slots=True)
class ReplyMessage:
    chat: Chat
    message: Message
    text: str


@dataclass(frozen=True, slots=True)
class SetChatTitle:
    chat: Chat
    title: str


@dataclass(frozen=True, slots=True)
class SendVideo:
    chat: Chat
    path: Path


OutgoingAction: TypeAlias = SendMessage | ReplyMessage | SetChatTitle | SendVideo


def action_label(action: OutgoingAction) -> str:
    match action:
        case SendMessage() | ReplyMessage():
            return "sendMessage"
        case SetChatTitle():
            return "setChatTitle"
        case SendVideo():
            return "sendVideo"
    raise TypeError(f"unsupported action {action!r}")


async def execute_action(action: OutgoingAction, transport: BotTransport) -> Any:
    match action:
        case SendMessage(chat=chat, text=text):
            envelope = await transport.call(
                "sendMessage", {"chat_id": chat.id, "text": text}
            )
        case ReplyMessage(chat=chat, message=message, text=text):
            envelope = await transport.call(
                "sendMessage",
                {
                    "chat_id": chat.id,
                    "text": text,
                    "reply_to_message_id": message.message_id,
                },
            )
        case SetChatTitle(chat=chat, title=title):
            envelope = await transport.call(
                "setChatTitle", {"chat_id": chat.id, "title": title}
            )
        case SendVideo(chat=chat, path=path):
            logger.info("engine.action.send_video", chat_id=chat.id, path=str(path))
            envelope = await transport.upload(
                "sendVideo",
                {"chat_id": chat.id},
                field=VIDEO_FIELD,
                path=path,
                content_type=VIDEO_CONTENT_TYPE,
            )
        case _:
            raise TypeError(f"unsupported action {action!r}")
    return unwrap_result(envelope)


class ActionQueue:
    """Unbounded FIFO of pending actions, consumed only by the poll loop."""

    def __init__(self) -> None:
        send: MemoryObjectSendStream[OutgoingAction]
        receive: MemoryObjectReceiveStream[OutgoingAction]
        send, receive = anyio.create_memory_object_stream(math.inf)
        self._send = send
        self._receive = receive

    def __len__(self) -> int:
        return self._receive.statistics().current_buffer_used

    def push(self, action: OutgoingAction) -> None:
        self._send.send_nowait(action)

    def drain(self) -> list[OutgoingAction]:
        """Remove and return every action currently queued, oldest first."""
        drained: list[OutgoingAction] = []
        for _ in range(len(self)):
            try:
                drained.append(self._receive.receive_nowait())
            except anyio.WouldBlock:
                break
        return drained

    async def flush(self, transport: BotTransport) -> int:
        pending = self.drain()
        if not pending:
            return 0
        logger.info("engine.flush.start", total=len(pending))
        succeeded = 0
        for index, action in enumerate(pending, start=1):
            try:
                await execute_action(action, transport)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "engine.action.failed",
                    index=index,
                    total=len(pending),
                    method=action_label(action),
                    chat_id=action.chat.id,
                    error=str(exc),
                    error_type=exc.__class__.__name__,
                )
                continue
            succeeded += 1
        logger.info("engine.flush.done", total=len(pending), succeeded=succeeded)
        return succeeded

    def close(self) -> None:
        self._send.close()
        self._receive.close()
