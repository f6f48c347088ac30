from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.database import Base


class ConversationType(str, Enum):
    PRIVATE = "PRIVATE"
    GROUP = "GROUP"


class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    type: Mapped[str] = mapped_column(String(10), nullable=False)  # PRIVATE/GROUP
    # solo para type=GROUP; una conversación por grupo
    group_id: Mapped[int | None] = mapped_column(ForeignKey("groups.id"), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False)


class DirectConversationParticipant(Base):
    __tablename__ = "direct_conversation_participants"
    __table_args__ = (UniqueConstraint("conversation_id", "user_id", name="uq_conversation_user"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
