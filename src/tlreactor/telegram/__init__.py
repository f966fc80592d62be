"""Long-polling Telegram Bot API gateway."""

from .actions import (
    ActionQueue,
    OutgoingAction,
    ReplyMessage,
    SendMessage,
    SendVideo,
    SetChatTitle,
    execute_action,
)
from .api_models import BotCommand, Chat, Message, Update, User
from .client import BotTransport, HttpBotTransport
from .engine import EngineState, PollEngine
from .errors import (
    BadAuthorization,
    BotNotFound,
    DeadWall,
    MalformedResponse,
    TelegramError,
    TransportError,
    UnknownError,
    classify,
)
from .server import BaseMessageProcessor, MessageProcessor, Server, extract_bot_commands

__all__ = [
    "ActionQueue",
    "BadAuthorization",
    "BaseMessageProcessor",
    "BotCommand",
    "BotNotFound",
    "BotTransport",
    "Chat",
    "DeadWall",
    "EngineState",
    "HttpBotTransport",
    "MalformedResponse",
    "Message",
    "MessageProcessor",
    "OutgoingAction",
    "PollEngine",
    "ReplyMessage",
    "SendMessage",
    "SendVideo",
    "Server",
    "SetChatTitle",
    "TelegramError",
    "TransportError",
    "Update",
    "UnknownError",
    "User",
    "classify",
    "execute_action",
    "extract_bot_commands",
]
