from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stackmentor.api.deps import get_db
from stackmentor.core.auth import get_current_user
from stackmentor.models.user import User
from stackmentor.schemas.user import UserPublic
from stackmentor.services import users

router = APIRouter(prefix="/users", tags=["users"])


# ✅ /search antes que /{user_id}
@router.get("/search", response_model=list[UserPublic])
def search_users(
    q: Optional[str] = None,
    role: Optional[str] = None,
    experience: Optional[str] = Query(None, description='"5+" o "2-5"'),
    industries: Optional[List[str]] = Query(None),
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return users.search_users(
        db,
        search_text=q,
        role=role,
        experience_range=experience,
        industries=industries,
    )


@router.get("/{user_id}", response_model=UserPublic)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return users.get_user(db, user_id)
