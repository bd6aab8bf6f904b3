"""Storage collaborator for posts and connected accounts."""

from .base import SocialStorage
from .memory import MemStorage, storage

__all__ = ["MemStorage", "SocialStorage", "storage"]
