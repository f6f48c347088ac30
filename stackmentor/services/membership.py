"""Grupos y miembros.

Cada operación pública es una sola transacción (``atomic``). Reglas:

- quien crea el grupo entra como ADMIN en la misma transacción;
- un usuario está como mucho una vez en cada grupo (``uq_group_user`` manda,
  la comprobación previa solo da un error más claro);
- quitar a alguien no protege al creador ni al último ADMIN.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stackmentor.core.clock import utc_now_naive
from stackmentor.core.database import atomic
from stackmentor.core.errors import Conflict, InvalidArgument, NotFound
from stackmentor.core.logging import get_module_logger
from stackmentor.models.group import GROUP_NAME_MAX, Group
from stackmentor.models.membership import GroupMember, GroupMemberType
from stackmentor.models.user import User
from stackmentor.schemas.group import GroupMemberView, GroupView

logger = get_module_logger()


def _get_group(db: Session, group_id: int) -> Group:
    group = db.get(Group, group_id)
    if not group:
        raise NotFound(f"Group {group_id} not found")
    return group


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound(f"User {user_id} not found")
    return user


def get_membership(db: Session, group_id: int, user_id: int) -> Optional[GroupMember]:
    return db.execute(
        select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
        )
    ).scalar_one_or_none()


def is_member(db: Session, group_id: int, user_id: int) -> bool:
    return get_membership(db, group_id, user_id) is not None


def _group_view(db: Session, group: Group) -> GroupView:
    # sin ORDER BY: el orden es el que devuelva la BD
    rows = db.execute(
        select(GroupMember, User)
        .join(User, User.id == GroupMember.user_id)
        .where(GroupMember.group_id == group.id)
    ).all()

    return GroupView(
        group_id=group.id,
        group_name=group.name,
        description=group.description,
        created_by=group.created_by,
        created_at=group.created_at,
        members=[
            GroupMemberView(
                user_id=u.id,
                name=u.full_name,
                role=m.role,
                joined_at=m.joined_at,
            )
            for (m, u) in rows
        ],
    )


def create_group(db: Session, name: str, description: Optional[str], creator: User) -> GroupView:
    name = (name or "").strip()
    if not name or len(name) > GROUP_NAME_MAX:
        raise InvalidArgument(f"Group name must be 1-{GROUP_NAME_MAX} characters")

    with atomic(db):
        now = utc_now_naive()
        group = Group(
            name=name,
            description=(description or "").strip() or None,
            created_by=creator.id,
            created_at=now,
        )
        db.add(group)
        db.flush()  # necesitamos group.id

        db.add(
            GroupMember(
                group_id=group.id,
                user_id=creator.id,
                role=GroupMemberType.ADMIN.value,
                joined_at=now,
            )
        )

    logger.info("group_created", group_id=group.id, created_by=creator.id)
    return _group_view(db, group)


def add_member(
    db: Session,
    group_id: int,
    user_id: int,
    role: Optional[GroupMemberType] = None,
) -> GroupView:
    with atomic(db):
        group = _get_group(db, group_id)
        _get_user(db, user_id)

        if is_member(db, group_id, user_id):
            raise Conflict(f"User {user_id} is already a member of group {group_id}")

        member_role = GroupMemberType(role) if role else GroupMemberType.MEMBER
        db.add(
            GroupMember(
                group_id=group_id,
                user_id=user_id,
                role=member_role.value,
                joined_at=utc_now_naive(),
            )
        )
        try:
            db.flush()
        except IntegrityError as exc:
            # otra petición lo insertó entre la comprobación y el insert
            raise Conflict(f"User {user_id} is already a member of group {group_id}") from exc

    logger.info("member_added", group_id=group_id, user_id=user_id, role=member_role.value)
    return _group_view(db, group)


def remove_member(db: Session, group_id: int, user_id: int) -> GroupView:
    with atomic(db):
        group = _get_group(db, group_id)

        member = get_membership(db, group_id, user_id)
        if not member:
            raise Conflict(f"User {user_id} is not a member of group {group_id}")

        db.delete(member)

    logger.info("member_removed", group_id=group_id, user_id=user_id)
    return _group_view(db, group)


def get_group_with_members(db: Session, group_id: int) -> GroupView:
    with atomic(db):
        group = _get_group(db, group_id)
        view = _group_view(db, group)
    return view


def list_groups_for_user(db: Session, user_id: int) -> list[Group]:
    return list(
        db.execute(
            select(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(GroupMember.user_id == user_id)
        ).scalars().all()
    )
