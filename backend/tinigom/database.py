import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from tinigom.core.config import settings

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def normalize_url(url: str) -> str:
    """postgres:// -> postgresql://, relative SQLite files pinned under backend/."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("sqlite:///./"):
        url = f"sqlite:///{os.path.join(BACKEND_DIR, url[len('sqlite:///./'):])}"
    return url


def make_engine(url: str, **kwargs) -> Engine:
    url = normalize_url(url)
    if url.startswith("sqlite"):
        # FastAPI runs sync handlers on a threadpool
        return create_engine(url, connect_args={"check_same_thread": False}, **kwargs)
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = make_engine(settings.FINANCE_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
