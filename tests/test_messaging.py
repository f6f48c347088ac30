import pytest

from stackmentor.core.errors import Conflict, InvalidArgument, NotFound
from stackmentor.models.conversation import ConversationType
from stackmentor.services import membership, messaging


def test_direct_conversation_is_reused_for_the_same_pair(db, make_user) -> None:
    mentor = make_user("Mentor", "One")
    mentee = make_user("Mentee", "Two")

    first = messaging.get_or_create_direct_conversation(db, mentor.id, mentee.id)
    again = messaging.get_or_create_direct_conversation(db, mentee.id, mentor.id)

    assert first.type == ConversationType.PRIVATE.value
    assert again.id == first.id


def test_direct_conversation_validation(db, make_user) -> None:
    user = make_user()

    with pytest.raises(InvalidArgument):
        messaging.get_or_create_direct_conversation(db, user.id, user.id)

    with pytest.raises(NotFound):
        messaging.get_or_create_direct_conversation(db, user.id, 999)


def test_direct_messages_and_read_flags(db, make_user) -> None:
    mentor = make_user("Mentor", "One")
    mentee = make_user("Mentee", "Two")
    outsider = make_user("Out", "Sider")
    conversation = messaging.get_or_create_direct_conversation(db, mentor.id, mentee.id)

    sent = messaging.send_message(db, conversation.id, mentor.id, " Hi! ", ["https://img/1.png"])

    assert sent.content == "Hi!"
    assert sent.sender_name == "Mentor One"
    assert sent.media_urls == ["https://img/1.png"]

    [unread] = messaging.list_messages(db, conversation.id, mentee.id)
    assert unread.is_read is False

    messaging.mark_read(db, sent.message_id, mentee.id)
    messaging.mark_read(db, sent.message_id, mentee.id)

    [read] = messaging.list_messages(db, conversation.id, mentee.id)
    assert read.is_read is True

    with pytest.raises(Conflict):
        messaging.send_message(db, conversation.id, outsider.id, "let me in")

    with pytest.raises(Conflict):
        messaging.list_messages(db, conversation.id, outsider.id)


def test_group_conversation_follows_membership(db, make_user) -> None:
    admin = make_user("Group", "Admin")
    member = make_user("Group", "Member")
    group = membership.create_group(db, "Chatters", None, admin)
    membership.add_member(db, group.group_id, member.id)

    conversation = messaging.get_or_create_group_conversation(db, group.group_id, admin.id)
    assert messaging.get_or_create_group_conversation(db, group.group_id, member.id).id == conversation.id

    messaging.send_message(db, conversation.id, member.id, "hello group")

    membership.remove_member(db, group.group_id, member.id)

    with pytest.raises(Conflict):
        messaging.send_message(db, conversation.id, member.id, "still here?")

    assert [m.content for m in messaging.list_messages(db, conversation.id, admin.id)] == ["hello group"]


def test_former_member_cannot_edit_or_delete_old_group_messages(db, make_user) -> None:
    admin = make_user("Group", "Admin")
    member = make_user("Group", "Member")
    group = membership.create_group(db, "Chatters", None, admin)
    membership.add_member(db, group.group_id, member.id)
    conversation = messaging.get_or_create_group_conversation(db, group.group_id, member.id)
    sent = messaging.send_message(db, conversation.id, member.id, "before leaving")

    membership.remove_member(db, group.group_id, member.id)

    with pytest.raises(Conflict):
        messaging.edit_message(db, sent.message_id, member.id, "rewritten")
    with pytest.raises(Conflict):
        messaging.delete_message(db, sent.message_id, member.id)

    [kept] = messaging.list_messages(db, conversation.id, admin.id)
    assert kept.content == "before leaving"
    assert kept.is_deleted is False


def test_group_conversation_requires_membership(db, make_user) -> None:
    admin = make_user()
    stranger = make_user("Stran", "Ger")
    group = membership.create_group(db, "Private", None, admin)

    with pytest.raises(Conflict):
        messaging.get_or_create_group_conversation(db, group.group_id, stranger.id)

    with pytest.raises(NotFound):
        messaging.get_or_create_group_conversation(db, 4242, admin.id)


def test_edit_and_soft_delete_are_sender_only(db, make_user) -> None:
    a = make_user("A", "Sender")
    b = make_user("B", "Reader")
    conversation = messaging.get_or_create_direct_conversation(db, a.id, b.id)
    sent = messaging.send_message(db, conversation.id, a.id, "first draft")

    with pytest.raises(Conflict):
        messaging.edit_message(db, sent.message_id, b.id, "hijack")

    edited = messaging.edit_message(db, sent.message_id, a.id, "final")
    assert edited.content == "final"
    assert edited.edited_at is not None

    deleted = messaging.delete_message(db, sent.message_id, a.id)
    assert deleted.is_deleted is True

    [shown] = messaging.list_messages(db, conversation.id, b.id)
    assert shown.is_deleted is True
    assert shown.content == ""

    with pytest.raises(Conflict):
        messaging.delete_message(db, sent.message_id, a.id)


def test_empty_message_is_rejected(db, make_user) -> None:
    a = make_user()
    b = make_user("B", "B")
    conversation = messaging.get_or_create_direct_conversation(db, a.id, b.id)

    with pytest.raises(InvalidArgument):
        messaging.send_message(db, conversation.id, a.id, "   ")
