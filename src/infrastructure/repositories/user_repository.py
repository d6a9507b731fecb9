# src/infrastructure/repositories/user_repository.py
"""
User Repository
Users double as channels; subscription edges live on both documents
"""

from typing import List, Optional
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from .base import BaseRepository
from src.app.models import User

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User / channel operations
    """

    sortable_fields = ("created_at", "username", "subscriber_count")

    def __init__(self, session: AsyncSession):
        """Initialize user repository"""
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username (case-insensitive)

        Args:
            username: Login / channel handle

        Returns:
            User or None
        """
        try:
            result = await self.session.execute(
                select(User).where(func.lower(User.username) == username.lower())
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"❌ Failed to get user by username: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self.session.execute(
                select(User).where(User.email == email.lower())
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"❌ Failed to get user by email: {e}")
            raise

    async def list_ids_after(self, after_id: Optional[str], limit: int) -> List[str]:
        """
        Keyset scan over user ids, used by batch jobs

        Args:
            after_id: Last id of the previous batch (None to start)
            limit: Batch size

        Returns:
            Up to `limit` ids in ascending order
        """
        query = select(User.id).order_by(User.id).limit(limit)
        if after_id is not None:
            query = query.where(User.id > after_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
