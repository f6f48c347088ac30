import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from stackmentor.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt ignora lo que pase de 72 bytes
BCRYPT_MAX_BYTES = 72


def _too_long(password: str) -> bool:
    return bool(password) and len(password.encode("utf-8")) > BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    if _too_long(password):
        raise ValueError(f"Password too long for bcrypt (max {BCRYPT_MAX_BYTES} bytes).")
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if _too_long(password):
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        return False


def create_access_token(user_id: int) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": str(user_id), "exp": expire}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[int]:
    """Id del usuario del token, o None si es inválido/caducado."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def new_verification_token() -> str:
    return secrets.token_urlsafe(32)
