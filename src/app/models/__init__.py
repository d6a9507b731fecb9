"""
ORM Models
One table per document type: users, videos, comments
"""

from .base import Base, utcnow, new_id
from .user import User, UserRole
from .video import Video, VideoStatus
from .comment import Comment, CommentState

__all__ = [
    "Base",
    "utcnow",
    "new_id",
    "User",
    "UserRole",
    "Video",
    "VideoStatus",
    "Comment",
    "CommentState",
]
