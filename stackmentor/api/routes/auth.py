from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stackmentor.api.deps import get_db, get_email_sender
from stackmentor.core.auth import get_current_user
from stackmentor.core.security import create_access_token
from stackmentor.models.user import User
from stackmentor.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserPublic
from stackmentor.services import users
from stackmentor.services.mailer import EmailSender


router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=UserPublic, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
):
    return users.register_user(db, payload, email_sender)

@router.get("/verify", response_model=UserPublic)
def verify(token: str, db: Session = Depends(get_db)):
    return users.verify_email(db, token)

@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = users.authenticate(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_verified:
        raise HTTPException(status_code=403, detail="Email not verified")

    token = create_access_token(user.id)
    return TokenResponse(access_token=token)

@router.get("/me", response_model=UserPublic)
def me(user: User = Depends(get_current_user)):
    return user
