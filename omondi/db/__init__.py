from omondi.db.database import Base, Database
from omondi.db.models import Character, User

__all__ = ["Base", "Database", "Character", "User"]
