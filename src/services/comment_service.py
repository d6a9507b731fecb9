"""
Comment Service
Threaded comments (one reply level) with soft delete
"""

from typing import Any, Optional

from src.app.models import Comment, utcnow
from src.domain.engagement import with_member
from src.domain.exceptions import (
    InvalidOperationError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from src.domain.interfaces import ICommentRepository, IUserRepository, IVideoRepository
from src.domain.models import Page
from src.domain.schemas import CommentResponse, CommentTextRequest, ListParams
from src.services.base_service import BaseService


class CommentService(BaseService):
    """
    Comment thread service

    Handles:
    - Top-level comments and replies to top-level comments
    - Author-only edits
    - Soft delete by author or admin (text redacted, thread shape kept)
    - Listing of live top-level comments with their live replies
    """

    def __init__(
        self,
        comment_repo: ICommentRepository,
        video_repo: IVideoRepository,
        user_repo: IUserRepository,
        config=None,
    ):
        super().__init__(config=config)
        self.comment_repo = comment_repo
        self.video_repo = video_repo
        self.user_repo = user_repo

    def get_service_name(self) -> str:
        return "comment"

    async def _require_comment(self, comment_id: str) -> Comment:
        comment = await self.comment_repo.get_by_id(comment_id)
        if comment is None:
            raise ResourceNotFoundError("Comment", comment_id)
        return comment

    # ========================================================================
    # Create
    # ========================================================================

    async def create_comment(
        self,
        video_id: str,
        author_id: str,
        text: str,
        parent_id: Optional[str] = None,
    ) -> Comment:
        """
        Post a comment, or a reply when parent_id is given

        Args:
            video_id: Video being commented on
            author_id: Acting user
            text: Comment body
            parent_id: Top-level comment on the same video (optional)

        Returns:
            Created comment

        Raises:
            ValidationError: Empty or over-long text
            ResourceNotFoundError: Unknown video / author / parent, or the
                parent belongs to another video
            InvalidOperationError: Parent is itself a reply
        """
        request = self.parse_payload(CommentTextRequest, {"text": text})

        if not await self.video_repo.exists(video_id):
            raise ResourceNotFoundError("Video", video_id)
        if not await self.user_repo.exists(author_id):
            raise ResourceNotFoundError("User", author_id)

        if parent_id is not None:
            parent = await self._require_comment(parent_id)
            if parent.video_id != video_id:
                raise ResourceNotFoundError("Comment", parent_id)
            if not parent.is_top_level:
                raise InvalidOperationError(
                    "Replies can only be attached to top-level comments",
                    parent_id=parent_id,
                )

        comment = await self.comment_repo.create(
            video_id=video_id,
            author_id=author_id,
            parent_id=parent_id,
            text=request.text,
        )

        if parent_id is not None:
            attached = await self.comment_repo.mutate(
                parent_id,
                lambda parent: setattr(
                    parent, "replies", with_member(parent.replies, comment.id)
                ),
            )
            if attached is None:
                await self.comment_repo.delete(comment.id)
                raise ResourceNotFoundError("Comment", parent_id)

        self.log_info(
            f"Comment {comment.id} on video {video_id}"
            + (f" (reply to {parent_id})" if parent_id else "")
        )
        return comment

    # ========================================================================
    # Edit / Delete
    # ========================================================================

    async def edit_comment(self, comment_id: str, actor_id: str, text: str) -> Comment:
        """
        Replace the text of one's own comment

        Raises:
            ResourceNotFoundError: Unknown comment
            PermissionDeniedError: Actor is not the author
            InvalidOperationError: Comment was deleted
        """
        request = self.parse_payload(CommentTextRequest, {"text": text})
        comment = await self._require_comment(comment_id)
        if comment.author_id != actor_id:
            raise PermissionDeniedError("edit", "Comment", comment_id)

        def apply(doc: Any) -> None:
            if doc.is_deleted:
                raise InvalidOperationError(
                    "Deleted comments cannot be edited", comment_id=comment_id
                )
            doc.text = request.text
            doc.is_edited = True
            doc.edited_at = utcnow()

        outcome = await self.comment_repo.mutate(comment_id, apply)
        if outcome is None:
            raise ResourceNotFoundError("Comment", comment_id)
        return outcome[0]

    async def soft_delete_comment(
        self, comment_id: str, actor_id: str, is_admin: bool = False
    ) -> Comment:
        """
        Redact a comment without removing it

        The comment stays in its parent's replies and its own replies are
        untouched. Deleting twice is a no-op.

        Args:
            comment_id: Comment to delete
            actor_id: Acting user
            is_admin: Caller-supplied admin capability

        Raises:
            ResourceNotFoundError: Unknown comment
            PermissionDeniedError: Actor is neither author nor admin
        """
        comment = await self._require_comment(comment_id)
        if comment.author_id != actor_id and not is_admin:
            raise PermissionDeniedError("delete", "Comment", comment_id)

        marker = self.config.content.redaction_marker

        def redact(doc: Any) -> None:
            doc.is_deleted = True
            doc.text = marker

        outcome = await self.comment_repo.mutate(comment_id, redact)
        if outcome is None:
            raise ResourceNotFoundError("Comment", comment_id)

        self.log_info(
            f"Comment {comment_id} deleted by {actor_id}{' (admin)' if is_admin else ''}"
        )
        return outcome[0]

    # ========================================================================
    # Listing
    # ========================================================================

    async def list_comments(
        self,
        video_id: str,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Page[CommentResponse]:
        """
        One page of live top-level comments, each with its live replies in
        creation order

        Raises:
            ResourceNotFoundError: Unknown video
            ValidationError: Bad paging or sort arguments
        """
        params = self.parse_payload(
            ListParams,
            {"page": page, "page_size": page_size, "sort_by": sort_by, "order": order},
        )
        self.validate_sort(params.sort_by, self.comment_repo.sortable_fields)

        if not await self.video_repo.exists(video_id):
            raise ResourceNotFoundError("Video", video_id)

        comments, total = await self.comment_repo.list_top_level(
            video_id, params.page, params.page_size, params.sort_by, params.order
        )

        items = []
        for comment in comments:
            replies = await self.comment_repo.visible_replies(comment)
            items.append(
                CommentResponse.from_model(
                    comment, replies=[CommentResponse.from_model(r) for r in replies]
                )
            )
        return Page.build(items, total, params.page, params.page_size)
