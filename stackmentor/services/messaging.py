"""Conversaciones directas (1 a 1) y de grupo, mensajes y acuses de lectura.

Quién puede participar:
- PRIVATE: los dos usuarios registrados en ``direct_conversation_participants``.
- GROUP: quien sea miembro del grupo *ahora mismo* (si sale del grupo, deja de ver el chat).
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.database import atomic
from stackmentor.core.errors import Conflict, InvalidArgument, NotFound
from stackmentor.core.logging import get_module_logger
from stackmentor.models.conversation import Conversation, ConversationType, DirectConversationParticipant
from stackmentor.models.group import Group
from stackmentor.models.membership import GroupMember
from stackmentor.models.message import Message, MessageReadStatus
from stackmentor.models.user import User
from stackmentor.schemas.message import MessageView
from stackmentor.services.membership import is_member

logger = get_module_logger()


def _get_conversation(db: Session, conversation_id: int) -> Conversation:
    conversation = db.get(Conversation, conversation_id)
    if not conversation:
        raise NotFound(f"Conversation {conversation_id} not found")
    return conversation


def _get_message(db: Session, message_id: int) -> Message:
    message = db.get(Message, message_id)
    if not message:
        raise NotFound(f"Message {message_id} not found")
    return message


def _require_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound(f"User {user_id} not found")
    return user


def can_participate(db: Session, conversation: Conversation, user_id: int) -> bool:
    if conversation.type == ConversationType.GROUP.value:
        return is_member(db, conversation.group_id, user_id)

    p = db.execute(
        select(DirectConversationParticipant).where(
            DirectConversationParticipant.conversation_id == conversation.id,
            DirectConversationParticipant.user_id == user_id,
        )
    ).scalar_one_or_none()
    return p is not None


def participant_ids(db: Session, conversation_id: int) -> list[int]:
    conversation = _get_conversation(db, conversation_id)
    if conversation.type == ConversationType.GROUP.value:
        stmt = select(GroupMember.user_id).where(GroupMember.group_id == conversation.group_id)
    else:
        stmt = select(DirectConversationParticipant.user_id).where(
            DirectConversationParticipant.conversation_id == conversation_id
        )
    return list(db.execute(stmt).scalars().all())


def _require_participant(db: Session, conversation: Conversation, user_id: int) -> None:
    if not can_participate(db, conversation, user_id):
        raise Conflict(f"User {user_id} is not a participant of conversation {conversation.id}")


def _find_direct_conversation(db: Session, user_id: int, other_user_id: int) -> Optional[Conversation]:
    # conversación PRIVATE donde estén los dos usuarios
    shared = (
        select(DirectConversationParticipant.conversation_id)
        .where(DirectConversationParticipant.user_id.in_((user_id, other_user_id)))
        .group_by(DirectConversationParticipant.conversation_id)
        .having(func.count(DirectConversationParticipant.user_id) == 2)
    )
    return db.execute(
        select(Conversation).where(
            Conversation.type == ConversationType.PRIVATE.value,
            Conversation.id.in_(shared),
        )
    ).scalars().first()


def get_or_create_direct_conversation(db: Session, user_id: int, other_user_id: int) -> Conversation:
    if user_id == other_user_id:
        raise InvalidArgument("Cannot start a conversation with yourself")

    with atomic(db):
        _require_user(db, user_id)
        _require_user(db, other_user_id)

        conversation = _find_direct_conversation(db, user_id, other_user_id)
        if conversation is None:
            conversation = Conversation(type=ConversationType.PRIVATE.value, created_at=utc_now_naive())
            db.add(conversation)
            db.flush()
            db.add_all(
                [
                    DirectConversationParticipant(conversation_id=conversation.id, user_id=user_id),
                    DirectConversationParticipant(conversation_id=conversation.id, user_id=other_user_id),
                ]
            )
            logger.info("direct_conversation_created", conversation_id=conversation.id)

    return conversation


def get_or_create_group_conversation(db: Session, group_id: int, user_id: int) -> Conversation:
    with atomic(db):
        if not db.get(Group, group_id):
            raise NotFound(f"Group {group_id} not found")
        if not is_member(db, group_id, user_id):
            raise Conflict(f"User {user_id} is not a member of group {group_id}")

        conversation = db.execute(
            select(Conversation).where(Conversation.group_id == group_id)
        ).scalar_one_or_none()
        if conversation is None:
            conversation = Conversation(
                type=ConversationType.GROUP.value,
                group_id=group_id,
                created_at=utc_now_naive(),
            )
            db.add(conversation)
            try:
                db.flush()
            except IntegrityError as exc:
                raise Conflict(f"Conversation for group {group_id} already exists, retry") from exc
            logger.info("group_conversation_created", conversation_id=conversation.id, group_id=group_id)

    return conversation


def _to_view(message: Message, sender: User, is_read: bool) -> MessageView:
    return MessageView(
        message_id=message.id,
        conversation_id=message.conversation_id,
        sender_id=sender.id,
        sender_name=sender.full_name,
        content="" if message.is_deleted else message.content,
        media_urls=[] if message.is_deleted else message.media_urls,
        sent_at=message.sent_at,
        edited_at=message.edited_at,
        is_deleted=message.is_deleted,
        deleted_at=message.deleted_at,
        is_read=is_read,
    )


def send_message(
    db: Session,
    conversation_id: int,
    sender_id: int,
    content: str,
    media_urls: Optional[list[str]] = None,
) -> MessageView:
    if not content or not content.strip():
        raise InvalidArgument("Message content must not be empty")

    with atomic(db):
        conversation = _get_conversation(db, conversation_id)
        _require_participant(db, conversation, sender_id)
        sender = _require_user(db, sender_id)

        message = Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            content=content.strip(),
            sent_at=utc_now_naive(),
        )
        message.media_urls = media_urls or []
        db.add(message)
        db.flush()

        # lo que envías, lo has leído
        db.add(MessageReadStatus(message_id=message.id, user_id=sender_id, read_at=message.sent_at))

    logger.info("message_sent", message_id=message.id, conversation_id=conversation_id, sender_id=sender_id)
    return _to_view(message, sender, is_read=True)


def list_messages(db: Session, conversation_id: int, viewer_id: int) -> list[MessageView]:
    conversation = _get_conversation(db, conversation_id)
    _require_participant(db, conversation, viewer_id)

    rows = db.execute(
        select(Message, User)
        .join(User, User.id == Message.sender_id)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.sent_at.asc(), Message.id.asc())
    ).all()

    message_ids = [m.id for (m, _u) in rows]
    read_ids: set[int] = set()
    if message_ids:
        read_ids = set(
            db.execute(
                select(MessageReadStatus.message_id).where(
                    MessageReadStatus.user_id == viewer_id,
                    MessageReadStatus.message_id.in_(message_ids),
                )
            ).scalars().all()
        )

    return [_to_view(m, u, is_read=m.id in read_ids) for (m, u) in rows]


def mark_read(db: Session, message_id: int, user_id: int) -> None:
    with atomic(db):
        message = _get_message(db, message_id)
        _require_participant(db, _get_conversation(db, message.conversation_id), user_id)

        already = db.execute(
            select(MessageReadStatus).where(
                MessageReadStatus.message_id == message_id,
                MessageReadStatus.user_id == user_id,
            )
        ).scalar_one_or_none()
        if already:
            return

        db.add(MessageReadStatus(message_id=message_id, user_id=user_id, read_at=utc_now_naive()))


def _require_sender(db: Session, message: Message, user_id: int) -> None:
    # quien ya no participa (p. ej. salió del grupo) tampoco toca sus mensajes antiguos
    _require_participant(db, _get_conversation(db, message.conversation_id), user_id)
    if message.sender_id != user_id:
        raise Conflict("Only the sender can change this message")
    if message.is_deleted:
        raise Conflict("Message already deleted")


def edit_message(db: Session, message_id: int, user_id: int, content: str) -> MessageView:
    if not content or not content.strip():
        raise InvalidArgument("Message content must not be empty")

    with atomic(db):
        message = _get_message(db, message_id)
        _require_sender(db, message, user_id)
        message.content = content.strip()
        message.edited_at = utc_now_naive()
        sender = _require_user(db, user_id)

    return _to_view(message, sender, is_read=True)


def delete_message(db: Session, message_id: int, user_id: int) -> MessageView:
    with atomic(db):
        message = _get_message(db, message_id)
        _require_sender(db, message, user_id)
        # borrado lógico: el hueco se queda en la conversación
        message.is_deleted = True
        message.deleted_at = utc_now_naive()
        sender = _require_user(db, user_id)

    logger.info("message_deleted", message_id=message_id)
    return _to_view(message, sender, is_read=True)
