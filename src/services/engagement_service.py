"""
Engagement Service
View accrual and the read views built on top of the engagement data
"""

from typing import Any, Optional

from src.app.models import User, utcnow
from src.domain.exceptions import ResourceNotFoundError
from src.domain.interfaces import IUserRepository, IVideoRepository
from src.domain.models import ChannelSummary, Dashboard, Page
from src.domain.schemas import WatchHistoryEntry
from src.services.base_service import BaseService
from src.services.subscription_service import SubscriptionService


class EngagementService(BaseService):
    """
    Engagement aggregation service

    Totals are computed from live rows on every call; nothing here is
    cached.
    """

    def __init__(
        self,
        video_repo: IVideoRepository,
        user_repo: IUserRepository,
        subscriptions: SubscriptionService,
        config=None,
    ):
        super().__init__(config=config)
        self.video_repo = video_repo
        self.user_repo = user_repo
        self.subscriptions = subscriptions

    def get_service_name(self) -> str:
        return "engagement"

    async def _require_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    # ========================================================================
    # Views
    # ========================================================================

    async def record_view(self, video_id: str, viewer_id: Optional[str] = None) -> int:
        """
        Count one view; signed-in viewers also get a watch history entry

        Every call counts, repeated views by the same viewer included.

        Args:
            video_id: Watched video
            viewer_id: Viewer, None for anonymous

        Returns:
            View count after this view

        Raises:
            ResourceNotFoundError: Unknown video or viewer
        """
        if viewer_id is not None and not await self.user_repo.exists(viewer_id):
            raise ResourceNotFoundError("User", viewer_id)

        views = await self.video_repo.increment_views(video_id)
        if views is None:
            raise ResourceNotFoundError("Video", video_id)

        if viewer_id is not None:
            watched_at = utcnow().isoformat()

            def append(user: Any) -> None:
                user.watch_history = list(user.watch_history or []) + [
                    {"video": video_id, "watched_at": watched_at}
                ]

            if await self.user_repo.mutate(viewer_id, append) is None:
                self.log_warning(f"Viewer {viewer_id} vanished before history was written")

        self.log_debug(f"View on {video_id} by {viewer_id or 'anonymous'} -> {views}")
        return views

    async def watch_history(
        self, user_id: str, page: int = 1, page_size: Optional[int] = None
    ) -> Page[WatchHistoryEntry]:
        """Watch history, newest first"""
        user = await self._require_user(user_id)
        page_size = page_size or self.config.content.default_page_size
        skip, limit = self.calculate_pagination(page, page_size)

        entries = list(reversed(user.watch_history or []))
        items = [WatchHistoryEntry.from_entry(e) for e in entries[skip : skip + limit]]
        return Page.build(items, len(entries), page, page_size)

    # ========================================================================
    # Aggregates
    # ========================================================================

    async def channel_summary(self, user_id: str) -> ChannelSummary:
        """
        Channel page data: completed public videos (newest first), their
        live view total and the subscriber count

        Raises:
            ResourceNotFoundError: Unknown user
        """
        await self.subscriptions.reconcile_user(user_id)
        user = await self._require_user(user_id)

        videos = await self.video_repo.published_by_owner(user_id)
        return ChannelSummary(
            channel_id=user.id,
            username=user.username,
            channel_name=user.channel_name or user.username,
            description=user.channel_description or "",
            banner=user.channel_banner,
            videos=videos,
            total_videos=len(videos),
            total_views=sum(video.views or 0 for video in videos),
            subscriber_count=user.subscriber_count,
        )

    async def dashboard(self, user_id: str) -> Dashboard:
        """Owner-facing totals over every one of the user's videos"""
        user = await self._require_user(user_id)
        stats = await self.video_repo.stats_for_owner(user_id)
        by_status = stats["by_status"]

        return Dashboard(
            user_id=user_id,
            total_videos=stats["total_videos"],
            published_videos=stats["published_videos"],
            processing_videos=by_status.get("processing", 0) + by_status.get("pending", 0),
            failed_videos=by_status.get("failed", 0),
            total_views=stats["total_views"],
            total_likes=stats["total_likes"],
            subscriber_count=user.subscriber_count,
            subscription_count=len(user.subscriptions or []),
            liked_videos_count=len(user.liked_videos or []),
        )
