# social_api/models/__init__.py
from .base import Base
from .user import User, UserRole
from .post import Post
from .workout import Workout
from .storage import StoredObject, StoredChunk

# Этот список нужен, чтобы IDE и инструменты видели, что экспортируется
__all__ = [
    "Base",
    "User", "UserRole",
    "Post",
    "Workout",
    "StoredObject", "StoredChunk",
]
