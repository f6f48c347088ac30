from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from stackmentor.core.config import settings


def _connect_args(url: str) -> dict:
    # sqlite + FastAPI (threadpool) necesita esto
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


# ✅ Dependency para FastAPI: inyecta Session en endpoints
def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Una operación = una transacción: commit al salir, rollback si algo falla."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
