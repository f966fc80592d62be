from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from ..logging import get_logger
from .actions import ReplyMessage, SendMessage, SendVideo, SetChatTitle
from .api_models import BotCommand, Chat, Message, Update
from .client import BotTransport, HttpBotTransport
from .engine import EngineState, PollEngine

if TYPE_CHECKING:
    from anyio.abc import TaskGroup

logger = get_logger(__name__)


class MessageProcessor(Protocol):
    def on_message(self, message: Message, server: Server) -> None: ...

    def on_bot_commands(
        self, message: Message, commands: list[BotCommand], server: Server
    ) -> None: ...

    def on_message_edited(self, message: Message, server: Server) -> None: ...


class BaseMessageProcessor:
    """No-op processor; subclasses override the hooks they care about."""

    def on_message(self, message: Message, server: Server) -> None:
        pass

    def on_bot_commands(
        self, message: Message, commands: list[BotCommand], server: Server
    ) -> None:
        pass

    def on_message_edited(self, message: Message, server: Server) -> None:
        pass


def _utf16_slice(text: str, offset: int, length: int) -> str:
    # entity offsets count UTF-16 code units
    encoded = text.encode("utf-16-le")
    return encoded[offset * 2 : (offset + length) * 2].decode(
        "utf-16-le", errors="ignore"
    )


def extract_bot_commands(message: Message) -> list[BotCommand]:
    """Resolve ``bot_command`` entities to command text.

    The command is the ``[offset, offset + length)`` slice of the message
    text, cut at the first ``@`` so ``/status@mybot`` yields ``/status``.
    """
    if not message.entities or message.text is None:
        return []
    commands: list[BotCommand] = []
    for entity in message.entities:
        if not entity.is_bot_command:
            continue
        raw = _utf16_slice(message.text, entity.offset, entity.length)
        command, _, _ = raw.partition("@")
        commands.append(
            BotCommand(command=command, offset=entity.offset, length=entity.length)
        )
    return commands


class Server:
    def __init__(
        self,
        token: str,
        processor: MessageProcessor,
        proxy: str | None = None,
        *,
        verify_tls: bool = True,
        transport: BotTransport | None = None,
    ) -> None:
        if transport is None:
            transport = HttpBotTransport(token, proxy=proxy, verify_tls=verify_tls)
        self._engine = PollEngine(transport)
        self._processor = processor
        logger.info("server.created", proxy_configured=proxy is not None)

    @property
    def engine(self) -> PollEngine:
        return self._engine

    @property
    def running(self) -> bool:
        return self._engine.state is EngineState.RUNNING

    async def start(self, *, task_group: TaskGroup | None = None) -> None:
        await self._engine.start(self._on_updates, task_group=task_group)

    def stop(self) -> None:
        self._engine.stop()

    async def aclose(self) -> None:
        await self._engine.aclose()

    def send_message(self, chat: Chat, text: str) -> None:
        self._engine.push_action(SendMessage(chat=chat, text=text))

    def reply_message(self, chat: Chat, message: Message, text: str) -> None:
        self._engine.push_action(ReplyMessage(chat=chat, message=message, text=text))

    def set_chat_title(self, chat: Chat, title: str) -> None:
        self._engine.push_action(SetChatTitle(chat=chat, title=title))

    def send_video(self, chat: Chat, path: str | Path) -> None:
        self._engine.push_action(SendVideo(chat=chat, path=Path(path)))

    def _on_updates(self, updates: list[Update]) -> None:
        logger.debug("server.updates", count=len(updates))
        for update in updates:
            self._process_update(update)

    def _process_update(self, update: Update) -> None:
        if update.message is not None:
            message = update.message
            commands = extract_bot_commands(message)
            if commands:
                logger.info(
                    "server.bot_commands",
                    update_id=update.update_id,
                    commands=[command.command for command in commands],
                )
                self._processor.on_bot_commands(message, commands, self)
            else:
                self._processor.on_message(message, self)
        if update.edited_message is not None:
            self._processor.on_message_edited(update.edited_message, self)
