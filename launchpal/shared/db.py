from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from launchpal.shared.config import settings

# Local SQLite DB under ./storage/ unless DATABASE_URL points elsewhere
ROOT = Path(__file__).resolve().parents[2]   # project root
STORAGE_DIR = ROOT / "storage"


def _db_url() -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    STORAGE_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(STORAGE_DIR / 'launchpal.db').as_posix()}"


DB_URL = _db_url()

_engine_kwargs: dict = {}
if DB_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    _engine_kwargs["pool_pre_ping"] = True

engine = create_engine(DB_URL, **_engine_kwargs)
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
