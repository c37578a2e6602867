from collections.abc import Generator

from fastapi import Header
from sqlalchemy.orm import Session

from scorebook.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    # Identity is supplied by the fronting auth layer; fall back for local dev.
    return (x_user_id or "").strip() or "dev-user"
