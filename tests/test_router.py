import pytest

from tests.factories import command_message_payload, message_payload, update_payload
from tests.telegram_fakes import FakeTransport
from tlreactor.router import EDIT_REPLY, CommandRouter
from tlreactor.telegram.api_models import BotCommand, Message
from tlreactor.telegram.server import Server


async def _serve(transport: FakeTransport, router: CommandRouter) -> Server:
    server = Server("123:abc", router, transport=transport)
    transport.on_drained = server.stop
    await server.start()
    return server


@pytest.mark.anyio
async def test_status_replies_with_bot_name() -> None:
    transport = FakeTransport(
        [[update_payload(1, command_message_payload("/status@reactor_bot"))]]
    )

    await _serve(transport, CommandRouter())

    assert transport.outgoing == [
        (
            "sendMessage",
            {
                "chat_id": 42,
                "text": "Reactor is online (next update 2).",
                "reply_to_message_id": 10,
            },
        )
    ]


@pytest.mark.anyio
async def test_unknown_command_is_reported() -> None:
    transport = FakeTransport([[update_payload(1, command_message_payload("/nope"))]])

    await _serve(transport, CommandRouter())

    assert transport.outgoing == [
        ("sendMessage", {"chat_id": 42, "text": 'Unknown command "/nope".'})
    ]


@pytest.mark.anyio
async def test_custom_routes_and_sender_required() -> None:
    seen: list[str] = []

    def get_video(message: Message, command: BotCommand, server: Server) -> None:
        seen.append(command.command)
        server.send_video(message.chat, "/tmp/clip.mpg")

    router = CommandRouter({})
    router.route("/get_video", get_video)
    anonymous = command_message_payload("/get_video", message_id=20)
    del anonymous["from"]
    transport = FakeTransport(
        [
            [
                update_payload(1, command_message_payload("/get_video")),
                update_payload(2, anonymous),
            ]
        ]
    )

    await _serve(transport, router)

    assert seen == ["/get_video"]
    assert [method for method, _ in transport.outgoing] == ["sendVideo"]


@pytest.mark.anyio
async def test_edited_message_gets_reply_and_plain_text_is_ignored() -> None:
    transport = FakeTransport(
        [
            [
                update_payload(1, message_payload(5, "hello")),
                update_payload(2, edited_message=message_payload(6, "hello!")),
            ]
        ]
    )

    await _serve(transport, CommandRouter())

    assert transport.outgoing == [
        (
            "sendMessage",
            {"chat_id": 42, "text": EDIT_REPLY, "reply_to_message_id": 6},
        )
    ]
