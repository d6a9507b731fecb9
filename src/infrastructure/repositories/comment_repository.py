# src/infrastructure/repositories/comment_repository.py
"""
Comment Repository
Handles comment queries with one level of reply threading
"""

from typing import List, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from .base import BaseRepository
from src.app.models import Comment

logger = logging.getLogger(__name__)


class CommentRepository(BaseRepository[Comment]):
    """
    Repository for Comment operations
    """

    sortable_fields = ("created_at", "like_count")

    def __init__(self, session: AsyncSession):
        """Initialize comment repository"""
        super().__init__(session, Comment)

    async def list_top_level(
        self,
        video_id: str,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Tuple[List[Comment], int]:
        """
        Get non-deleted top-level comments for a video

        Args:
            video_id: Video ID
            page: 1-based page number
            page_size: Items per page
            sort_by: created_at / like_count
            order: asc / desc

        Returns:
            (comments on the page, total matching)
        """
        try:
            query = select(Comment).where(
                Comment.video_id == video_id,
                Comment.parent_id.is_(None),
                Comment.is_deleted.is_(False),
            )
            return await self.paginate(query, page, page_size, sort_by, order)
        except Exception as e:
            logger.error(f"❌ Failed to get comments by video: {e}")
            raise

    async def visible_replies(self, parent: Comment) -> List[Comment]:
        """Replies of `parent` in the order they were attached, deleted ones left out"""
        replies = await self.get_many(parent.replies or [])
        return [reply for reply in replies if not reply.is_deleted]
