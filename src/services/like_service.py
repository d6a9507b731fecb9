"""
Like Service
Idempotent like / unlike toggles for videos and comments
"""

from typing import Any

from src.app.models import utcnow
from src.domain.engagement import set_membership, toggle_stamped_member
from src.domain.exceptions import ResourceNotFoundError
from src.domain.interfaces import (
    ICommentRepository,
    IDocumentStore,
    IUserRepository,
    IVideoRepository,
)
from src.domain.models import LikeToggleResult
from src.services.base_service import BaseService


class LikeService(BaseService):
    """
    Like toggle service

    The like set and its cached count are written together in one
    version-checked update; the count is always the size of the set.
    """

    def __init__(
        self,
        video_repo: IVideoRepository,
        comment_repo: ICommentRepository,
        user_repo: IUserRepository,
        config=None,
    ):
        super().__init__(config=config)
        self.video_repo = video_repo
        self.comment_repo = comment_repo
        self.user_repo = user_repo

    def get_service_name(self) -> str:
        return "like"

    async def _toggle(
        self, repo: IDocumentStore, resource_type: str, target_id: str, actor_id: str
    ) -> LikeToggleResult:
        def flip(target: Any) -> bool:
            target.likes, liked = toggle_stamped_member(target.likes, actor_id, utcnow())
            target.like_count = len(target.likes)
            return liked

        outcome = await repo.mutate(target_id, flip)
        if outcome is None:
            raise ResourceNotFoundError(resource_type, target_id)

        target, liked = outcome
        self.log_debug(
            f"{resource_type} {target_id} {'liked' if liked else 'unliked'} by {actor_id} "
            f"({target.like_count})"
        )
        return LikeToggleResult(liked=liked, like_count=target.like_count)

    async def toggle_video_like(self, video_id: str, actor_id: str) -> LikeToggleResult:
        """
        Like a video, or remove the like if the actor already liked it

        The actor's liked_videos set follows the result.

        Raises:
            ResourceNotFoundError: Unknown video or actor
        """
        if not await self.user_repo.exists(actor_id):
            raise ResourceNotFoundError("User", actor_id)

        result = await self._toggle(self.video_repo, "Video", video_id, actor_id)

        def mirror(user: Any) -> None:
            user.liked_videos = set_membership(user.liked_videos, video_id, result.liked)

        if await self.user_repo.mutate(actor_id, mirror) is None:
            self.log_warning(f"User {actor_id} vanished before liked_videos was updated")
        return result

    async def toggle_comment_like(
        self, comment_id: str, actor_id: str
    ) -> LikeToggleResult:
        """
        Like / unlike a comment

        Raises:
            ResourceNotFoundError: Unknown comment or actor
        """
        if not await self.user_repo.exists(actor_id):
            raise ResourceNotFoundError("User", actor_id)
        return await self._toggle(self.comment_repo, "Comment", comment_id, actor_id)
