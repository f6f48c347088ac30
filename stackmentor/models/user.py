from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.database import Base

# Las listas (skills, intereses, media) se guardan como texto unido con este separador
LIST_DELIMITER = ", "


def join_list(values: list[str] | None) -> str | None:
    if values is None:
        return None
    return LIST_DELIMITER.join(v.strip() for v in values if v and v.strip())


def split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


class RoleType(str, Enum):
    MENTOR = "MENTOR"
    MENTEE = "MENTEE"


class PositionType(str, Enum):
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    MEMBER = "MEMBER"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str | None] = mapped_column(String(16), unique=True, nullable=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    city: Mapped[str | None] = mapped_column(String(26), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # MENTOR/MENTEE
    position: Mapped[str] = mapped_column(String(10), default=PositionType.MEMBER.value, nullable=False)
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    years_of_experience: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    skills_raw: Mapped[str | None] = mapped_column("skills", Text, nullable=True)
    interests_raw: Mapped[str | None] = mapped_column("interests", Text, nullable=True)

    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False)

    # ✅ fuera del modelo siempre son listas; el texto unido es cosa de la BD
    @property
    def skills(self) -> list[str]:
        return split_list(self.skills_raw)

    @skills.setter
    def skills(self, values: list[str] | None) -> None:
        self.skills_raw = join_list(values)

    @property
    def interests(self) -> list[str]:
        return split_list(self.interests_raw)

    @interests.setter
    def interests(self, values: list[str] | None) -> None:
        self.interests_raw = join_list(values)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def age(self) -> int | None:
        if self.date_of_birth is None:
            return None
        today = date.today()
        born = self.date_of_birth
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))
