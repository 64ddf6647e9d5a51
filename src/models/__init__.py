"""ORM models."""

from models.base import Base
from models.log import Log
from models.stat import Stat
from models.user import User

__all__ = [
    "Base",
    "Log",
    "Stat",
    "User",
]
