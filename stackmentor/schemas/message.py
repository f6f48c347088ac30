from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stackmentor.models.conversation import ConversationType


class ConversationPublic(BaseModel):
    id: int
    type: ConversationType
    group_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)
    media_urls: List[str] = []


class MessageEdit(BaseModel):
    content: str = Field(min_length=1)


class MessageView(BaseModel):
    message_id: int
    conversation_id: int
    sender_id: int
    sender_name: str
    content: str
    media_urls: List[str] = []
    sent_at: datetime
    edited_at: Optional[datetime] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    is_read: bool = False
