"""
Database connection using SQLAlchemy.

The engine is owned by an explicit Database object that the app (or the GUI)
constructs and hands to request handlers; there is no module-level session.
"""
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """One engine plus its session factory."""

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        engine_kwargs.setdefault("pool_pre_ping", True)
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def init_db(self):
        """Create all tables."""
        from omondi.db.models import Character, User  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database ready ({self.engine.url.get_backend_name()})")

    def seed_admin(self, username: Optional[str], password: Optional[str]) -> bool:
        """Create the single user from configuration if none exists yet."""
        from omondi.core.security import hash_password, password_problem
        from omondi.db.models import User

        if not username or not password:
            return False
        problem = password_problem(password)
        if problem:
            logger.warning(f"Not seeding user '{username}' from ADMIN_PASSWORD: {problem}")
            return False

        db = self.session()
        try:
            if db.query(User).count() > 0:
                return False
            db.add(User(username=username, password_hash=hash_password(password)))
            db.commit()
            logger.info(f"Seeded initial user '{username}'")
            return True
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()
