from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stackmentor.api.deps import get_db
from stackmentor.core.auth import get_current_user
from stackmentor.core.errors import NotFound
from stackmentor.models.group import Group
from stackmentor.models.membership import GroupMemberType
from stackmentor.models.user import User
from stackmentor.schemas.group import GroupCreate, GroupPublic, GroupView, MemberAdd
from stackmentor.services import membership

# ✅ SSE
from stackmentor.realtime.sse import publish_from_sync


router = APIRouter(prefix="/groups", tags=["groups"])


def _require_admin(db: Session, group_id: int, current_user: User) -> None:
    # 404 antes que 403
    if not db.get(Group, group_id):
        raise NotFound(f"Group {group_id} not found")

    m = membership.get_membership(db, group_id, current_user.id)
    if not m or m.role != GroupMemberType.ADMIN.value:
        raise HTTPException(status_code=403, detail="Solo un ADMIN del grupo puede hacer esto")


@router.post("", response_model=GroupView, status_code=201)
def create_group(
    payload: GroupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership.create_group(db, payload.name, payload.description, current_user)


# ✅ /mine antes que /{group_id}
@router.get("/mine", response_model=list[GroupPublic])
def my_groups(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership.list_groups_for_user(db, current_user.id)


@router.get("/{group_id}", response_model=GroupView)
def get_group(
    group_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return membership.get_group_with_members(db, group_id)


@router.post("/{group_id}/members", response_model=GroupView)
def add_member(
    group_id: int,
    payload: MemberAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_admin(db, group_id, current_user)

    view = membership.add_member(db, group_id, payload.user_id, payload.role)

    publish_from_sync(
        "GROUP_MEMBER_ADDED",
        {"group_id": group_id, "user_id": payload.user_id},
        [m.user_id for m in view.members],
    )
    return view


@router.delete("/{group_id}/members/{user_id}", response_model=GroupView)
def remove_member(
    group_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # salir del grupo uno mismo no necesita ser ADMIN
    if user_id != current_user.id:
        _require_admin(db, group_id, current_user)

    view = membership.remove_member(db, group_id, user_id)

    # también avisamos al que sale
    publish_from_sync(
        "GROUP_MEMBER_REMOVED",
        {"group_id": group_id, "user_id": user_id},
        [m.user_id for m in view.members] + [user_id],
    )
    return view
