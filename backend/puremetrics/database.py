import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from puremetrics.config import get_settings


def build_engine(database_url: str) -> Engine:
    """Create the engine backing the local store.

    SQLite is the default local cache; other URLs get a pre-ping pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


settings = get_settings()

engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the data directory for SQLite files, then the local-store tables."""
    from puremetrics.models.store import Base

    bind = bind or engine
    url = str(bind.url)
    if url.startswith("sqlite:///") and not url.endswith(":memory:"):
        directory = os.path.dirname(url.replace("sqlite:///", "", 1))
        if directory:
            os.makedirs(directory, exist_ok=True)

    Base.metadata.create_all(bind=bind)
