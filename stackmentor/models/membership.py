from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.database import Base


class GroupMemberType(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class GroupMember(Base):
    __tablename__ = "group_members"
    # un usuario solo puede estar una vez en cada grupo
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_user"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(15), default=GroupMemberType.MEMBER.value, nullable=False)  # ADMIN/MEMBER
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False)
