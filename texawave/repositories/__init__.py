"""
Repositories package.
Data access layer over Motor collections.
"""
from .base_repository import BaseRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository"
]
