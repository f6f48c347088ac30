from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stackmentor.api.deps import get_db
from stackmentor.core.auth import get_current_user
from stackmentor.models.user import User
from stackmentor.schemas.message import ConversationPublic, MessageCreate, MessageEdit, MessageView
from stackmentor.services import messaging
from stackmentor.realtime.sse import publish_from_sync

router = APIRouter(tags=["messages"])


@router.post("/conversations/direct/{user_id}", response_model=ConversationPublic)
def open_direct_conversation(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messaging.get_or_create_direct_conversation(db, current_user.id, user_id)


@router.post("/conversations/group/{group_id}", response_model=ConversationPublic)
def open_group_conversation(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messaging.get_or_create_group_conversation(db, group_id, current_user.id)


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageView])
def list_messages(
    conversation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messaging.list_messages(db, conversation_id, current_user.id)


@router.post("/conversations/{conversation_id}/messages", response_model=MessageView, status_code=201)
def send_message(
    conversation_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    view = messaging.send_message(db, conversation_id, current_user.id, payload.content, payload.media_urls)

    # 🔴 SSE: solo a quien participa en la conversación
    publish_from_sync(
        "MESSAGE_SENT",
        view.model_dump(mode="json"),
        messaging.participant_ids(db, conversation_id),
    )
    return view


@router.post("/messages/{message_id}/read")
def mark_read(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    messaging.mark_read(db, message_id, current_user.id)
    return {"ok": True}


@router.patch("/messages/{message_id}", response_model=MessageView)
def edit_message(
    message_id: int,
    payload: MessageEdit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messaging.edit_message(db, message_id, current_user.id, payload.content)


@router.delete("/messages/{message_id}", response_model=MessageView)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return messaging.delete_message(db, message_id, current_user.id)
