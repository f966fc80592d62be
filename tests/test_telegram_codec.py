import msgspec
import pytest

from tests.factories import (
    chat_payload,
    failure,
    message_payload,
    ok,
    update_payload,
    user_payload,
)
from tlreactor.telegram.api_models import Message, Update
from tlreactor.telegram.codec import (
    decode_chat,
    decode_chat_member,
    decode_message,
    decode_message_entity,
    decode_photo_size,
    decode_sticker,
    decode_update,
    decode_update_batch,
    decode_user,
    decode_video,
    unwrap_result,
)
from tlreactor.telegram.errors import (
    BadAuthorization,
    BotNotFound,
    MalformedResponse,
    UnknownError,
)


def test_decode_message_maps_nested_fields() -> None:
    payload = message_payload(
        10,
        "hi there",
        chat=chat_payload(-100, "supergroup", title="Team", username="team_chat"),
        forward_from=user_payload(8, "Bob", username="bob"),
        reply_to_message=message_payload(9, "earlier"),
        new_chat_members=[user_payload(11, "Carol"), user_payload(12, "Dan")],
        left_chat_member=user_payload(13, "Eve"),
        sticker={"file_id": "s1", "width": 512, "height": 512, "is_animated": False},
    )

    msg = decode_message(payload)

    assert msg.message_id == 10
    assert msg.date == 1_700_000_000
    assert msg.text == "hi there"
    assert msg.chat.id == -100
    assert msg.chat.title == "Team"
    assert msg.chat.user_name == "team_chat"
    assert msg.from_ is not None
    assert msg.from_.first_name == "Alice"
    assert msg.forward_from is not None
    assert msg.forward_from.username == "bob"
    assert msg.reply_to_message is not None
    assert msg.reply_to_message.message_id == 9
    assert msg.reply_to_message.text == "earlier"
    assert msg.new_chat_members is not None
    assert [user.id for user in msg.new_chat_members] == [11, 12]
    assert msg.left_chat_member is not None
    assert msg.left_chat_member.first_name == "Eve"
    assert msg.sticker is not None
    assert msg.sticker.emoji is None


def test_optional_fields_are_unset_when_absent() -> None:
    msg = decode_message(
        {"message_id": 1, "date": 5, "chat": {"id": 3, "type": "private"}}
    )

    assert msg.from_ is None
    assert msg.text is None
    assert msg.entities is None
    assert msg.new_chat_members is None
    assert msg.reply_to_message is None
    assert msg.chat.title is None
    assert msg.chat.user_name is None


def test_present_zero_and_empty_values_are_kept() -> None:
    msg = decode_message(
        message_payload(0, "", entities=[], new_chat_members=[])
    )

    assert msg.message_id == 0
    assert msg.text == ""
    assert msg.entities == []
    assert msg.new_chat_members == []


def test_decode_entity_with_user_and_url() -> None:
    entity = decode_message_entity(
        {
            "type": "text_mention",
            "offset": 2,
            "length": 4,
            "user": user_payload(5, "Zed"),
            "url": "https://example.com",
        }
    )

    assert entity.type == "text_mention"
    assert entity.user is not None
    assert entity.user.id == 5
    assert entity.url == "https://example.com"
    assert entity.is_bot_command is False


def test_decode_video_with_thumb() -> None:
    video = decode_video(
        {
            "file_id": "v1",
            "width": 640,
            "height": 480,
            "duration": 12,
            "thumb": {"file_id": "t1", "width": 90, "height": 60},
            "mime_type": "video/mp4",
        }
    )

    assert video.thumb is not None
    assert video.thumb.file_id == "t1"
    assert video.thumb.file_size is None
    assert video.mime_type == "video/mp4"
    assert video.file_size is None


def test_decode_chat_member_flags() -> None:
    member = decode_chat_member(
        {
            "user": user_payload(),
            "status": "administrator",
            "can_change_info": True,
            "can_pin_messages": False,
        }
    )

    assert member.status == "administrator"
    assert member.can_change_info is True
    assert member.can_pin_messages is False
    assert member.can_post_messages is None
    assert member.until_date is None


def test_decode_small_entities() -> None:
    assert decode_chat(chat_payload(1, "group")).type == "group"
    assert decode_user(user_payload(3, "Ann", last_name="Lee")).last_name == "Lee"
    assert decode_photo_size(
        {"file_id": "p", "width": 1, "height": 2, "file_size": 0}
    ).file_size == 0
    sticker = decode_sticker(
        {
            "file_id": "s",
            "width": 1,
            "height": 1,
            "is_animated": True,
            "emoji": ":)",
            "set_name": "pack",
        }
    )
    assert sticker.set_name == "pack"


def test_accepts_raw_json_bytes_and_str() -> None:
    raw = msgspec.json.encode(user_payload(4, "Raw"))

    assert decode_user(raw).id == 4
    assert decode_user(raw.decode()).first_name == "Raw"


@pytest.mark.parametrize(
    ("decoder", "payload"),
    [
        (decode_user, {"id": 1, "first_name": "NoBotFlag"}),
        (decode_chat, {"id": 1}),
        (decode_message, {"message_id": 1, "chat": {"id": 1, "type": "private"}}),
        (decode_message, {"message_id": 1, "date": 1}),
        (decode_message_entity, {"type": "bot_command", "offset": 0}),
        (decode_sticker, {"file_id": "s", "width": 1, "height": 1}),
        (decode_video, {"file_id": "v", "width": 1, "height": 1}),
        (decode_chat_member, {"status": "member"}),
        (decode_update, {"message": message_payload()}),
    ],
)
def test_missing_required_field_raises(decoder, payload) -> None:
    with pytest.raises(MalformedResponse):
        decoder(payload)


def test_missing_required_field_in_nested_entity_raises() -> None:
    payload = message_payload(sender={"id": 1, "is_bot": False})

    with pytest.raises(MalformedResponse, match="first_name"):
        decode_message(payload)


def test_wrong_type_raises() -> None:
    with pytest.raises(MalformedResponse):
        decode_user({"id": "1", "is_bot": False, "first_name": "A"})


def test_invalid_json_raises() -> None:
    with pytest.raises(MalformedResponse, match="invalid JSON"):
        decode_update(b"{not json")


def test_failure_envelope_short_circuits_entity_decode() -> None:
    with pytest.raises(BadAuthorization):
        decode_user(failure(401, "Unauthorized"))


def test_nested_failure_envelope_short_circuits() -> None:
    payload = message_payload(sender=failure(404, "Not Found"))

    with pytest.raises(BotNotFound):
        decode_message(payload)


def test_decode_update_batch_from_envelope() -> None:
    updates = decode_update_batch(
        ok(
            [
                update_payload(5, message_payload(1, "a")),
                update_payload(6, edited_message=message_payload(2, "b")),
            ]
        )
    )

    assert [update.update_id for update in updates] == [5, 6]
    assert isinstance(updates[0], Update)
    assert isinstance(updates[0].message, Message)
    assert updates[0].edited_message is None
    assert updates[1].message is None
    assert updates[1].edited_message is not None
    assert updates[1].edited_message.text == "b"


def test_decode_update_batch_from_bare_list() -> None:
    assert decode_update_batch([]) == []
    assert len(decode_update_batch([update_payload(1)])) == 1


def test_decode_update_batch_failure_envelope() -> None:
    with pytest.raises(UnknownError) as exc:
        decode_update_batch(failure(409, "Conflict"))

    assert exc.value.error_code == 409
    assert exc.value.description == "Conflict"


def test_decode_update_batch_rejects_non_list_result() -> None:
    with pytest.raises(MalformedResponse, match="list of updates"):
        decode_update_batch(ok({"update_id": 1}))


def test_unknown_fields_are_ignored() -> None:
    update = decode_update(
        update_payload(3, message_payload(), callback_query={"id": "x"})
    )

    assert update.update_id == 3


def test_unwrap_result() -> None:
    assert unwrap_result(ok({"id": 1})) == {"id": 1}
    with pytest.raises(MalformedResponse, match="ok"):
        unwrap_result({"result": 1})
    with pytest.raises(MalformedResponse, match="result"):
        unwrap_result({"ok": True})
    with pytest.raises(MalformedResponse, match="envelope"):
        unwrap_result([1, 2])
