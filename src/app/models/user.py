# src/app/models/user.py
"""
User Model
A user is also a channel: subscriber edges are stored on both ends
"""

import enum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum as SQLEnum,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .base import Base, new_id, utcnow


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    User / channel document

    `subscriptions` lists the channels this user follows, `subscribers` lists
    the users following this channel. An edge A -> B is recorded in both
    A.subscriptions and B.subscribers.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)

    # Identity
    username = Column(String(30), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER)

    # Channel profile
    channel_name = Column(String(100), nullable=True)
    channel_description = Column(Text, default="")
    channel_banner = Column(String(500), nullable=True)

    # Subscription graph
    subscribers = Column(JSON, nullable=False, default=list)
    subscriber_count = Column(Integer, nullable=False, default=0)
    subscriptions = Column(JSON, nullable=False, default=list)

    # Engagement history
    watch_history = Column(
        JSON, nullable=False, default=list, comment='[{"video", "watched_at"}]'
    )
    liked_videos = Column(JSON, nullable=False, default=list)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    # Usernames are unique regardless of case
    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
    )
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> dict:
        """Public profile; credentials and email are never exported"""
        return {
            "id": self.id,
            "username": self.username,
            "avatar": self.avatar,
            "channel": {
                "name": self.channel_name or self.username,
                "description": self.channel_description,
                "banner": self.channel_banner,
                "subscriber_count": self.subscriber_count,
            },
            "joined_at": self.created_at.isoformat() if self.created_at else None,
        }
