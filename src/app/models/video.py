# src/app/models/video.py
"""
Video Model
Represents an uploaded video with its processing state and engagement sets
"""

import enum

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)

from .base import Base, new_id, utcnow


class VideoStatus(str, enum.Enum):
    """Video processing status"""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Video(Base):
    """
    Uploaded video entity

    `likes` holds {"user": id, "liked_at": iso} entries; `like_count` is
    rewritten from its length on every toggle.
    """

    __tablename__ = "videos"

    id = Column(String(32), primary_key=True, default=new_id)

    # Owner is fixed at creation
    owner_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Uploading user",
    )

    # Basic Info
    title = Column(String(100), nullable=False, index=True)
    description = Column(Text, default="")
    video_url = Column(String(500), nullable=False, comment="Media locator")
    thumbnail_url = Column(String(500), nullable=False, comment="Thumbnail locator")
    duration_seconds = Column(Integer, default=0)
    file_size = Column(BigInteger, default=0, comment="Media size in bytes")

    # Engagement
    views = Column(BigInteger, nullable=False, default=0, index=True)
    likes = Column(JSON, nullable=False, default=list)
    like_count = Column(Integer, nullable=False, default=0)

    # Category & Tags
    tags = Column(JSON, nullable=False, default=list, comment="Normalized tags")
    category = Column(String(20), nullable=False, default="other", index=True)

    # Visibility & processing
    is_public = Column(Boolean, nullable=False, default=True)
    status = Column(
        SQLEnum(VideoStatus),
        nullable=False,
        default=VideoStatus.PENDING,
        index=True,
        comment="Processing status",
    )
    upload_progress = Column(Integer, nullable=False, default=0)
    failure_reason = Column(Text, nullable=True)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Video(id={self.id}, title={(self.title or '')[:30]}...)>"

    @property
    def is_published(self) -> bool:
        """Completed and public: visible to everyone"""
        return self.status == VideoStatus.COMPLETED and bool(self.is_public)

    @property
    def liker_ids(self) -> list:
        return [like["user"] for like in (self.likes or [])]

    def to_dict(self) -> dict:
        """Convert model to dictionary"""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "video_url": self.video_url,
            "thumbnail_url": self.thumbnail_url,
            "duration_seconds": self.duration_seconds,
            "views": self.views,
            "like_count": self.like_count,
            "tags": list(self.tags or []),
            "category": self.category,
            "is_public": self.is_public,
            "status": self.status.value if self.status else None,
            "upload_progress": self.upload_progress,
            "file_size": self.file_size,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
