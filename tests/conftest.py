import os
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

from stackmentor.core.database import Base  # noqa: E402
from stackmentor.core.security import hash_password  # noqa: E402
from stackmentor.models.user import RoleType, User  # noqa: E402
import stackmentor.models.group  # noqa: E402,F401
import stackmentor.models.membership  # noqa: E402,F401
import stackmentor.models.verification_token  # noqa: E402,F401
import stackmentor.models.conversation  # noqa: E402,F401
import stackmentor.models.message  # noqa: E402,F401

PASSWORD = "supersecret1"


@pytest.fixture(scope="session")
def password_hash() -> str:
    return hash_password(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db, password_hash):
    counter = {"n": 0}

    def _make_user(
        first_name: str = "Ada",
        last_name: str = "Lovelace",
        *,
        role: RoleType = RoleType.MENTOR,
        years: int | None = None,
        industry: str | None = None,
        verified: bool = True,
        skills: list[str] | None = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            hashed_password=password_hash,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date(1990, 1, 1),
            role=role.value,
            years_of_experience=years,
            industry=industry,
            is_verified=verified,
        )
        if skills is not None:
            user.skills = skills
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user
