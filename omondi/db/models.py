"""
Database models: the single studio user and the character library.
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Uuid

from omondi.db.database import Base


class User(Base):
    """Exactly one row is expected; signup is closed once it exists."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(150), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Character(Base):
    """A named, ordered set of reference images."""
    __tablename__ = "characters"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), unique=True, nullable=False)

    # [{"data_uri": "data:image/png;base64,...", "size": 12345}, ...]
    images = Column(JSON, nullable=False, default=list)

    # Sum of image sizes, kept for quota checks
    size_bytes = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
