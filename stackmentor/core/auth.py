from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from stackmentor.api.deps import get_db
from stackmentor.core.security import decode_access_token
from stackmentor.models.user import User

bearer = HTTPBearer(auto_error=False)


def user_from_token(db: Session, token: str | None) -> User | None:
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if creds is None:
        raise HTTPException(status_code=401, detail="Missing Bearer token")

    user = user_from_token(db, creds.credentials)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return user
