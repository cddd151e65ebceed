from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from memoboard.shared.config import settings, ROOT

# Local SQLite DB under ./storage/ (created if missing)
if settings.DB_URL.startswith("sqlite:///") and ":memory:" not in settings.DB_URL:
    (ROOT / "storage").mkdir(parents=True, exist_ok=True)

_connect_args = {"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {}

engine = create_engine(settings.DB_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

class Base(DeclarativeBase):
    pass

# FastAPI dep
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
