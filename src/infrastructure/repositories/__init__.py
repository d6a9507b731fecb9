"""
Repository Layer
Data access patterns for all entities
"""

from .base import BaseRepository
from .user_repository import UserRepository
from .video_repository import VideoRepository
from .comment_repository import CommentRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "VideoRepository",
    "CommentRepository",
]
