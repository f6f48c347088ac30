from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.database import Base
from stackmentor.models.user import join_list, split_list


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"), nullable=False, index=True)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    media_urls_raw: Mapped[str | None] = mapped_column("media_urls", Text, nullable=True)

    sent_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False, index=True)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @property
    def media_urls(self) -> list[str]:
        return split_list(self.media_urls_raw)

    @media_urls.setter
    def media_urls(self, values: list[str] | None) -> None:
        self.media_urls_raw = join_list(values) or None


class MessageReadStatus(Base):
    __tablename__ = "message_read_status"
    __table_args__ = (UniqueConstraint("message_id", "user_id", name="uq_message_user"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    message_id: Mapped[int] = mapped_column(ForeignKey("messages.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    read_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False)
