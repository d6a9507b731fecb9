# src/domain/models.py
"""
Result records returned by the services.

These are plain DTOs, not DB models. The request layer serializes them in
whatever format it speaks.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

T = TypeVar("T")


@dataclass
class LikeToggleResult:
    liked: bool
    like_count: int


@dataclass
class SubscriptionResult:
    subscribed: bool
    subscriber_count: int


@dataclass
class Page(Generic[T]):
    """
    One page of a listing.

    `total_pages` is ceil(total_count / page_size).
    """

    items: List[T]
    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, items: List[T], total_count: int, page: int, page_size: int) -> "Page[T]":
        total_pages = math.ceil(total_count / page_size) if page_size else 0
        return cls(
            items=items,
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ChannelSummary:
    channel_id: str
    username: str
    channel_name: str
    description: str
    banner: Any
    videos: List[Any] = field(default_factory=list)
    total_videos: int = 0
    total_views: int = 0
    subscriber_count: int = 0


@dataclass
class Dashboard:
    """Owner-facing totals over all of the user's videos"""

    user_id: str
    total_videos: int = 0
    published_videos: int = 0
    processing_videos: int = 0
    failed_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    subscriber_count: int = 0
    subscription_count: int = 0
    liked_videos_count: int = 0


@dataclass
class ReconciliationReport:
    users_scanned: int = 0
    edges_repaired: int = 0
    counts_repaired: int = 0

    def merge(self, other: "ReconciliationReport") -> None:
        self.users_scanned += other.users_scanned
        self.edges_repaired += other.edges_repaired
        self.counts_repaired += other.counts_repaired


__all__ = [
    "LikeToggleResult",
    "SubscriptionResult",
    "Page",
    "ChannelSummary",
    "Dashboard",
    "ReconciliationReport",
]
