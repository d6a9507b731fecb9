# src/app/models/comment.py
"""
Comment Model
Comments belong to a video; replies go one level deep
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from .base import Base, new_id, utcnow


class CommentState(str, enum.Enum):
    """Content state; a redacted comment keeps its id and thread position"""

    ACTIVE = "active"
    REDACTED = "redacted"


class Comment(Base):
    """
    Comment entity

    `parent_id` is None for top-level comments. A reply's parent is always a
    top-level comment. `replies` holds child ids in creation order.
    """

    __tablename__ = "comments"

    id = Column(String(32), primary_key=True, default=new_id)

    video_id = Column(
        String(32),
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id = Column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id = Column(
        String(32),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    text = Column(Text, nullable=False)
    replies = Column(JSON, nullable=False, default=list)

    likes = Column(JSON, nullable=False, default=list)
    like_count = Column(Integer, nullable=False, default=0)

    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Comment(id={self.id}, video={self.video_id}, state={self.state.value})>"

    @property
    def state(self) -> CommentState:
        return CommentState.REDACTED if self.is_deleted else CommentState.ACTIVE

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    @property
    def liker_ids(self) -> list:
        return [like["user"] for like in (self.likes or [])]
