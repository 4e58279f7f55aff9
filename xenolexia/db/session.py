"""Database session and engine management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from xenolexia.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Store calls are offloaded to worker threads by the translation index
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }


engine = create_engine(
    str(settings.DATABASE_URL),
    echo=settings.DEBUG,
    **_engine_options(str(settings.DATABASE_URL)),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Keep objects usable after commit
)
