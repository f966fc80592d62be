from __future__ import annotations

from collections.abc import Callable, Mapping

from .logging import get_logger
from .telegram.api_models import BotCommand, Message
from .telegram.server import BaseMessageProcessor, Server

logger = get_logger(__name__)

CommandHandler = Callable[[Message, BotCommand, Server], None]

EDIT_REPLY = "Edited messages are not processed."


def status_command(message: Message, command: BotCommand, server: Server) -> None:
    me = server.engine.me
    name = me.first_name if me is not None else "bot"
    server.reply_message(
        message.chat,
        message,
        f"{name} is online (next update {server.engine.cursor}).",
    )


class CommandRouter(BaseMessageProcessor):
    """Routes bot commands to handlers by exact command text."""

    def __init__(self, routes: Mapping[str, CommandHandler] | None = None) -> None:
        self._routes: dict[str, CommandHandler] = (
            dict(routes) if routes is not None else {"/status": status_command}
        )

    def route(self, command: str, handler: CommandHandler) -> None:
        self._routes[command] = handler

    def on_bot_commands(
        self, message: Message, commands: list[BotCommand], server: Server
    ) -> None:
        if message.from_ is None:
            return
        for command in commands:
            handler = self._routes.get(command.command)
            if handler is None:
                logger.info(
                    "router.unknown_command",
                    command=command.command,
                    chat_id=message.chat.id,
                )
                server.send_message(
                    message.chat, f'Unknown command "{command.command}".'
                )
                continue
            handler(message, command, server)

    def on_message_edited(self, message: Message, server: Server) -> None:
        server.reply_message(message.chat, message, EDIT_REPLY)
