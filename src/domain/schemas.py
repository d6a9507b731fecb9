"""
Request payloads and response records (pydantic).

Payload limits come from ContentSettings so deployments can tune them
without code changes.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.app.config import get_content_settings
from src.app.models import Comment, UserRole, VideoStatus
from src.domain.engagement import normalize_tags


# ============================================================================
# Shared validators
# ============================================================================


def _check_length(value: Optional[str], limit: int, field_name: str) -> Optional[str]:
    if value is not None and len(value) > limit:
        raise ValueError(f"{field_name} must be at most {limit} characters")
    return value


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    allowed = get_content_settings().categories
    if value not in allowed:
        raise ValueError(f"category must be one of: {', '.join(allowed)}")
    return value


# ============================================================================
# Users
# ============================================================================


class UserCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    username: str = Field(min_length=3, max_length=30)
    email: str = Field(min_length=3, max_length=255)
    password_hash: str = Field(min_length=1)
    role: UserRole = UserRole.USER
    avatar: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("email is not a valid address")
        return v


class ChannelProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    banner: Optional[str] = Field(default=None, max_length=500)


# ============================================================================
# Videos
# ============================================================================


class VideoIngestRequest(BaseModel):
    """Upload intake payload; media bytes live elsewhere, only the locator is kept"""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str = ""
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_public: bool = True
    video_url: str = Field(min_length=1)
    thumbnail_url: Optional[str] = None
    file_size: int = Field(default=0, ge=0)
    duration_seconds: int = Field(default=0, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _check_length(v, get_content_settings().title_max_length, "title")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _check_length(
            v, get_content_settings().description_max_length, "description"
        )

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return _check_category(v)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Union[str, List[str], None]) -> List[str]:
        return normalize_tags(v)


class VideoUpdateRequest(BaseModel):
    """Owner edits; owner and media locator are not accepted"""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _check_length(v, get_content_settings().title_max_length, "title")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_length(
            v, get_content_settings().description_max_length, "description"
        )

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return _check_category(v)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Union[str, List[str], None]) -> Optional[List[str]]:
        return None if v is None else normalize_tags(v)


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: Optional[str] = ""
    video_url: str
    thumbnail_url: str
    duration_seconds: Optional[int] = 0
    views: int
    like_count: int
    tags: List[str] = Field(default_factory=list)
    category: str
    is_public: bool
    status: VideoStatus
    upload_progress: int
    file_size: Optional[int] = 0
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Comments
# ============================================================================


class CommentTextRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    text: str = Field(min_length=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _check_length(v, get_content_settings().comment_max_length, "text")


class CommentResponse(BaseModel):
    id: str
    video_id: str
    author_id: str
    parent_id: Optional[str] = None
    text: str
    like_count: int = 0
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    is_deleted: bool = False
    created_at: datetime
    reply_ids: List[str] = Field(default_factory=list)
    replies: List["CommentResponse"] = Field(default_factory=list)

    @classmethod
    def from_model(
        cls, comment: Comment, replies: Optional[List["CommentResponse"]] = None
    ) -> "CommentResponse":
        return cls(
            id=comment.id,
            video_id=comment.video_id,
            author_id=comment.author_id,
            parent_id=comment.parent_id,
            text=comment.text,
            like_count=comment.like_count or 0,
            is_edited=bool(comment.is_edited),
            edited_at=comment.edited_at,
            is_deleted=bool(comment.is_deleted),
            created_at=comment.created_at,
            reply_ids=list(comment.replies or []),
            replies=replies or [],
        )


# ============================================================================
# Listing
# ============================================================================


class ListParams(BaseModel):
    """Pagination + sort contract shared by every listing"""

    model_config = ConfigDict(extra="forbid")

    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1, validate_default=True)
    sort_by: str = "created_at"
    order: Literal["asc", "desc"] = "desc"

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: Optional[int]) -> int:
        settings = get_content_settings()
        if v is None:
            return settings.default_page_size
        if v > settings.max_page_size:
            raise ValueError(f"page_size must be at most {settings.max_page_size}")
        return v


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    avatar: Optional[str] = None
    channel_name: Optional[str] = None


class WatchHistoryEntry(BaseModel):
    video_id: str
    watched_at: datetime

    @classmethod
    def from_entry(cls, entry: dict) -> "WatchHistoryEntry":
        return cls(video_id=entry["video"], watched_at=entry["watched_at"])


CommentResponse.model_rebuild()

__all__ = [
    "UserCreateRequest",
    "ChannelProfileUpdate",
    "VideoIngestRequest",
    "VideoUpdateRequest",
    "VideoResponse",
    "CommentTextRequest",
    "CommentResponse",
    "ListParams",
    "UserSummary",
    "WatchHistoryEntry",
]
