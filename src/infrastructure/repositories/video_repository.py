# src/infrastructure/repositories/video_repository.py
"""
Video Repository
Handles all video-related database operations
"""

from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy import String, cast, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from .base import BaseRepository
from src.app.models import Comment, Video, VideoStatus

logger = logging.getLogger(__name__)


class VideoRepository(BaseRepository[Video]):
    """
    Repository for Video operations
    Provides listing, view counting and per-owner aggregates
    """

    sortable_fields = ("created_at", "updated_at", "views", "like_count", "title")

    def __init__(self, session: AsyncSession):
        """Initialize video repository"""
        super().__init__(session, Video)

    # ========================================================================
    # Listing
    # ========================================================================

    async def list_videos(
        self,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "created_at",
        order: str = "desc",
        category: Optional[str] = None,
        search: Optional[str] = None,
        owner_id: Optional[str] = None,
        published_only: bool = True,
    ) -> Tuple[List[Video], int]:
        """
        List videos with optional filters

        Args:
            page: 1-based page number
            page_size: Items per page
            sort_by: One of sortable_fields
            order: asc / desc
            category: Exact category match (optional)
            search: Case-insensitive match on title, description or tags
            owner_id: Restrict to one uploader (optional)
            published_only: Only completed public videos

        Returns:
            (videos on the page, total matching)
        """
        try:
            query = select(Video)

            if published_only:
                query = query.where(
                    Video.status == VideoStatus.COMPLETED, Video.is_public.is_(True)
                )
            if owner_id:
                query = query.where(Video.owner_id == owner_id)
            if category:
                query = query.where(Video.category == category)
            if search:
                pattern = f"%{search}%"
                query = query.where(
                    or_(
                        Video.title.ilike(pattern),
                        Video.description.ilike(pattern),
                        cast(Video.tags, String).ilike(pattern),
                    )
                )

            return await self.paginate(query, page, page_size, sort_by, order)
        except Exception as e:
            logger.error(f"❌ Failed to list videos: {e}")
            raise

    async def published_by_owner(self, owner_id: str) -> List[Video]:
        """
        All completed public videos of one uploader, newest first

        Args:
            owner_id: Uploader ID

        Returns:
            List of videos
        """
        try:
            result = await self.session.execute(
                select(Video)
                .where(
                    Video.owner_id == owner_id,
                    Video.status == VideoStatus.COMPLETED,
                    Video.is_public.is_(True),
                )
                .order_by(Video.created_at.desc(), Video.id)
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"❌ Failed to get published videos of {owner_id}: {e}")
            raise

    # ========================================================================
    # Views
    # ========================================================================

    async def increment_views(self, video_id: str) -> Optional[int]:
        """
        Add one view as a single UPDATE so concurrent viewers never lose
        increments. The version column is left alone.

        Args:
            video_id: Video ID

        Returns:
            Views after the increment, or None if the video is missing
        """
        try:
            result = await self.session.execute(
                update(Video)
                .where(Video.id == video_id)
                .values(views=Video.views + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                return None

            views = (
                await self.session.execute(
                    select(Video.views).where(Video.id == video_id)
                )
            ).scalar_one()
            await self.session.commit()
            return int(views)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"❌ Failed to increment views for {video_id}: {e}")
            raise

    # ========================================================================
    # Analytics & Statistics
    # ========================================================================

    async def stats_for_owner(self, owner_id: str) -> Dict[str, Any]:
        """
        Aggregate counts over every video of an uploader

        Args:
            owner_id: Uploader ID

        Returns:
            Dictionary with per-status counts and view/like totals
        """
        try:
            result = await self.session.execute(
                select(
                    Video.status,
                    func.count(Video.id).label("videos"),
                    func.coalesce(func.sum(Video.views), 0).label("views"),
                    func.coalesce(func.sum(Video.like_count), 0).label("likes"),
                )
                .where(Video.owner_id == owner_id)
                .group_by(Video.status)
            )

            stats: Dict[str, Any] = {
                "by_status": {status.value: 0 for status in VideoStatus},
                "total_videos": 0,
                "total_views": 0,
                "total_likes": 0,
            }
            for row in result.all():
                status = row.status.value if isinstance(row.status, VideoStatus) else row.status
                stats["by_status"][status] = int(row.videos)
                stats["total_videos"] += int(row.videos)
                stats["total_views"] += int(row.views)
                stats["total_likes"] += int(row.likes)

            stats["published_videos"] = await self.count_published(owner_id)
            return stats
        except Exception as e:
            logger.error(f"❌ Failed to get stats for owner {owner_id}: {e}")
            raise

    async def count_published(self, owner_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Video.id)).where(
                Video.owner_id == owner_id,
                Video.status == VideoStatus.COMPLETED,
                Video.is_public.is_(True),
            )
        )
        return int(result.scalar_one() or 0)

    # ========================================================================
    # Delete
    # ========================================================================

    async def delete_with_comments(self, video_id: str) -> int:
        """
        Remove a video and every comment attached to it in one transaction

        Args:
            video_id: Video ID

        Returns:
            Number of comments removed
        """
        try:
            removed = await self.session.execute(
                delete(Comment).where(Comment.video_id == video_id)
            )
            await self.session.execute(delete(Video).where(Video.id == video_id))
            await self.session.commit()

            logger.info(
                f"🗑️ Deleted video {video_id} with {removed.rowcount} comments"
            )
            return int(removed.rowcount or 0)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"❌ Failed to delete video {video_id}: {e}")
            raise
