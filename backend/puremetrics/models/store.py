from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class LocalBlob(Base):
    """One serialized collection in the local key-value store."""

    __tablename__ = "local_blobs"

    key = Column(String(64), primary_key=True)
    data = Column(LargeBinary, nullable=False)
    size_bytes = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
