from collections.abc import Generator

from sqlalchemy.orm import Session

from app.db import session as db_session


def get_db() -> Generator[Session | None, None, None]:
    """Yield a session, or None when persistence is not configured."""
    if not db_session.is_database_configured():
        yield None
        return
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()
