from datetime import date, timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from stackmentor.core.errors import Conflict, InvalidArgument, NotFound
from stackmentor.models.user import RoleType, User, join_list, split_list
from stackmentor.models.verification_token import VerificationToken
from stackmentor.schemas.user import RegisterRequest
from stackmentor.services import users
from stackmentor.services.mailer import LoggingEmailSender

from conftest import PASSWORD


def _register_payload(**overrides) -> RegisterRequest:
    data = {
        "name": "Grace Hopper",
        "email": "Grace@Example.com",
        "password": PASSWORD,
        "date_of_birth": date(1990, 12, 9),
        "role": RoleType.MENTOR,
        "years_of_experience": 12,
        "industry": "Software",
        "skills_or_interests": ["COBOL", "Compilers"],
        "city": "Arlington",
        "state": "va",
    }
    data.update(overrides)
    return RegisterRequest(**data)


def test_register_request_normalizes_email() -> None:
    assert _register_payload().email == "grace@example.com"


def test_register_request_rejects_future_birth_date() -> None:
    with pytest.raises(ValidationError):
        _register_payload(date_of_birth=date.today() + timedelta(days=1))


def test_register_user_creates_unverified_user_and_sends_link(db) -> None:
    sender = LoggingEmailSender()

    user = users.register_user(db, _register_payload(), sender)

    assert user.first_name == "Grace"
    assert user.last_name == "Hopper"
    assert user.state == "VA"
    assert user.is_verified is False
    assert user.position == "MEMBER"
    assert user.skills == ["COBOL", "Compilers"]
    assert user.interests == []
    assert user.hashed_password != PASSWORD

    token = db.execute(select(VerificationToken).where(VerificationToken.user_id == user.id)).scalar_one()
    assert len(sender.outbox) == 1
    recipient, subject, body = sender.outbox[0]
    assert recipient == "grace@example.com"
    assert "Verification" in subject
    assert token.token in body


def test_register_mentee_stores_interests(db) -> None:
    user = users.register_user(
        db,
        _register_payload(role=RoleType.MENTEE, skills_or_interests=["Python", "Career change"]),
        LoggingEmailSender(),
    )

    assert user.interests == ["Python", "Career change"]
    assert user.skills == []
    assert user.interests_raw == "Python, Career change"


def test_register_duplicate_email_conflicts(db) -> None:
    users.register_user(db, _register_payload(), LoggingEmailSender())

    with pytest.raises(Conflict):
        users.register_user(db, _register_payload(name="Other Person"), LoggingEmailSender())


@pytest.mark.parametrize("name", ["Cher", "Mary Ann Lee"])
def test_register_requires_first_and_last_name(db, name) -> None:
    with pytest.raises(InvalidArgument):
        users.register_user(db, _register_payload(name=name), LoggingEmailSender())


def test_verify_email_marks_user_and_consumes_token(db) -> None:
    sender = LoggingEmailSender()
    user = users.register_user(db, _register_payload(), sender)
    token = db.execute(select(VerificationToken.token)).scalar_one()

    verified = users.verify_email(db, token)

    assert verified.id == user.id
    assert verified.is_verified is True
    assert db.execute(select(VerificationToken)).first() is None

    with pytest.raises(NotFound):
        users.verify_email(db, token)


def test_verify_email_rejects_expired_token(db) -> None:
    users.register_user(db, _register_payload(), LoggingEmailSender())
    vt = db.execute(select(VerificationToken)).scalar_one()
    vt.expires_at = vt.expires_at - timedelta(days=2)
    db.commit()

    with pytest.raises(InvalidArgument):
        users.verify_email(db, vt.token)


def test_authenticate(db, make_user) -> None:
    user = make_user()

    assert users.authenticate(db, user.email.upper(), PASSWORD).id == user.id
    assert users.authenticate(db, user.email, "wrong-password") is None
    assert users.authenticate(db, "nobody@example.com", PASSWORD) is None


def test_search_users_parses_experience_range(db, make_user) -> None:
    senior = make_user("Linus", "Torvalds", years=20, industry="Software")
    junior = make_user("Junior", "Dev", years=1, industry="Software")

    assert [u.id for u in users.search_users(db, experience_range="5+")] == [senior.id]
    assert [u.id for u in users.search_users(db, experience_range="0-2", search_text="junior")] == [junior.id]

    with pytest.raises(InvalidArgument):
        users.search_users(db, experience_range="lots")


def test_get_user_missing(db) -> None:
    with pytest.raises(NotFound):
        users.get_user(db, 404)


def test_list_fields_are_joined_only_in_storage(db, make_user) -> None:
    user = make_user(skills=[" SQL ", "", "Go"])

    stored = db.execute(select(User.skills_raw).where(User.id == user.id)).scalar_one()

    assert stored == "SQL, Go"
    assert user.skills == ["SQL", "Go"]
    assert split_list(join_list(["a", "b"])) == ["a", "b"]
