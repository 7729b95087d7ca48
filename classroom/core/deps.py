from datetime import datetime, timezone

from classroom.db.session import SessionLocal


# every request that needs DB will get a fresh session, and it will always close.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# deadline and late checks read the clock through here so tests can pin it
def get_now() -> datetime:
    return datetime.now(timezone.utc)
