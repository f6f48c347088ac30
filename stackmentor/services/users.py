import re
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.config import settings
from stackmentor.core.database import atomic
from stackmentor.core.errors import Conflict, InvalidArgument, NotFound
from stackmentor.core.logging import get_module_logger
from stackmentor.core.security import hash_password, new_verification_token, verify_password
from stackmentor.models.user import PositionType, RoleType, User
from stackmentor.models.verification_token import VerificationToken
from stackmentor.schemas.user import RegisterRequest
from stackmentor.services.mailer import EmailSender, verification_email
from stackmentor.services.user_search import build_search_filter, parse_experience_range

logger = get_module_logger()


def split_full_name(name: str) -> tuple[str, str]:
    parts = re.split(r"\s+", name.strip())
    if len(parts) < 2:
        raise InvalidArgument("Only include your first and last name, separated by a space")
    if len(parts) > 2:
        raise InvalidArgument("Full name must not include middle names")
    return parts[0], parts[1]


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound(f"User {user_id} not found")
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()


def register_user(db: Session, payload: RegisterRequest, email_sender: EmailSender) -> User:
    first_name, last_name = split_full_name(payload.name)
    try:
        hashed = hash_password(payload.password)
    except ValueError as exc:
        raise InvalidArgument(str(exc)) from exc

    with atomic(db):
        if get_user_by_email(db, payload.email):
            raise Conflict("Email already in use")

        user = User(
            email=payload.email,
            hashed_password=hashed,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=payload.date_of_birth,
            city=payload.city.strip(),
            state=payload.state.strip().upper(),
            gender=payload.gender,
            role=payload.role.value,
            position=PositionType.MEMBER.value,
            years_of_experience=payload.years_of_experience,
            industry=payload.industry.strip() if payload.industry else None,
            is_verified=False,
        )
        # mentor -> habilidades, mentee -> intereses
        if payload.role == RoleType.MENTOR:
            user.skills = payload.skills_or_interests
        else:
            user.interests = payload.skills_or_interests

        db.add(user)
        db.flush()

        token = new_verification_token()
        db.add(
            VerificationToken(
                token=token,
                user_id=user.id,
                expires_at=utc_now_naive() + timedelta(hours=settings.VERIFICATION_TOKEN_HOURS),
            )
        )

    logger.info("user_registered", user_id=user.id, role=user.role)

    # el correo va después del commit: si falla, el usuario ya existe y puede pedir otro
    subject, body = verification_email(f"{settings.VERIFY_URL_BASE}?token={token}")
    email_sender.send(user.email, subject, body)
    return user


def verify_email(db: Session, token: str) -> User:
    with atomic(db):
        vt = db.execute(
            select(VerificationToken).where(VerificationToken.token == token)
        ).scalar_one_or_none()
        if not vt:
            raise NotFound("Verification token not found")

        if vt.expires_at < utc_now_naive():
            raise InvalidArgument("Verification token expired")

        user = get_user(db, vt.user_id)
        user.is_verified = True
        db.delete(vt)

    logger.info("user_verified", user_id=user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def search_users(
    db: Session,
    search_text: Optional[str] = None,
    role: Optional[str] = None,
    experience_range: Optional[str] = None,
    industries: Optional[list[str]] = None,
) -> list[User]:
    min_years, max_years = parse_experience_range(experience_range)
    user_filter = build_search_filter(
        search_text=search_text,
        role=role,
        min_years=min_years,
        max_years=max_years,
        industries=industries,
    )
    return list(db.execute(select(User).where(user_filter.where())).scalars().all())
