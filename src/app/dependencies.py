"""
Service Dependency Injection
Builds the service graph on top of one database session
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.config import Config, get_config
from src.app.database import db_manager
from src.infrastructure.repositories import (
    CommentRepository,
    UserRepository,
    VideoRepository,
)
from src.services import (
    CommentService,
    EngagementService,
    LikeService,
    SubscriptionService,
    UserService,
    VideoService,
)


@dataclass
class Services:
    """Every core service, sharing one session"""

    users: UserService
    likes: LikeService
    subscriptions: SubscriptionService
    comments: CommentService
    videos: VideoService
    engagement: EngagementService


# ============================================================================
# Service Factories
# ============================================================================


def build_services(session: AsyncSession, config: Optional[Config] = None) -> Services:
    """
    Wire repositories and services for one unit of work

    Args:
        session: Database session the repositories will use
        config: Configuration (global config if omitted)

    Returns:
        Services container
    """
    config = config or get_config()

    user_repo = UserRepository(session)
    video_repo = VideoRepository(session)
    comment_repo = CommentRepository(session)

    subscriptions = SubscriptionService(user_repo, config=config)
    return Services(
        users=UserService(user_repo, config=config),
        likes=LikeService(video_repo, comment_repo, user_repo, config=config),
        subscriptions=subscriptions,
        comments=CommentService(comment_repo, video_repo, user_repo, config=config),
        videos=VideoService(video_repo, user_repo, config=config),
        engagement=EngagementService(video_repo, user_repo, subscriptions, config=config),
    )


@asynccontextmanager
async def service_scope(config: Optional[Config] = None) -> AsyncIterator[Services]:
    """
    Open a session from the global db_manager and yield services bound to it

    Usage:
        async with service_scope() as services:
            await services.likes.toggle_video_like(video_id, user_id)
    """
    async with db_manager.session() as session:
        yield build_services(session, config=config)
