"""
Video Service
Business logic for the video lifecycle: intake, processing, visibility,
owner edits and deletion
"""

from typing import Any, Dict, List, Optional

from src.app.models import Video, VideoStatus
from src.domain.engagement import can_transition, is_visible_to
from src.domain.exceptions import (
    InvalidOperationError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from src.domain.interfaces import IUserRepository, IVideoRepository
from src.domain.models import Page
from src.domain.schemas import ListParams, VideoIngestRequest, VideoUpdateRequest
from src.services.base_service import BaseService


class VideoService(BaseService):
    """
    Video operations service

    Handles:
    - Upload intake (record created in `processing`)
    - Processing transitions signalled by the media pipeline
    - Visibility: completed AND (public OR viewer is owner)
    - Owner-only updates, owner-or-admin deletes
    """

    def __init__(
        self,
        video_repo: IVideoRepository,
        user_repo: IUserRepository,
        config=None,
    ):
        super().__init__(config=config)
        self.video_repo = video_repo
        self.user_repo = user_repo

    def get_service_name(self) -> str:
        return "video"

    async def _require_video(self, video_id: str) -> Video:
        video = await self.video_repo.get_by_id(video_id)
        if video is None:
            raise ResourceNotFoundError("Video", video_id)
        return video

    def _check_tag_count(self, tags: Optional[List[str]]) -> None:
        limit = self.config.content.max_tags
        if tags is not None and len(tags) > limit:
            raise InvalidOperationError(
                f"At most {limit} tags are allowed, got {len(tags)}",
                tag_count=len(tags),
                max_tags=limit,
            )

    # ========================================================================
    # Intake
    # ========================================================================

    async def ingest(self, owner_id: str, payload: Dict[str, Any]) -> Video:
        """
        Register an uploaded video

        Args:
            owner_id: Uploading user
            payload: title, description, category, tags, is_public,
                video_url, thumbnail_url, file_size, duration_seconds

        Returns:
            Created video in `processing`

        Raises:
            ValidationError: Missing / over-long title, over-long
                description, unknown category
            InvalidOperationError: More tags than allowed
            ResourceNotFoundError: Unknown owner
        """
        request = self.parse_payload(VideoIngestRequest, payload)
        self._check_tag_count(request.tags)

        if not await self.user_repo.exists(owner_id):
            raise ResourceNotFoundError("User", owner_id)

        content = self.config.content
        video = await self.video_repo.create(
            owner_id=owner_id,
            title=request.title,
            description=request.description,
            category=request.category or content.default_category,
            tags=request.tags,
            is_public=request.is_public,
            video_url=request.video_url,
            thumbnail_url=request.thumbnail_url or content.default_thumbnail,
            file_size=request.file_size,
            duration_seconds=request.duration_seconds,
            status=VideoStatus.PROCESSING,
            upload_progress=0,
        )

        self.log_info(f"Ingested video {video.id} for {owner_id}: {video.title!r}")
        return video

    # ========================================================================
    # Processing
    # ========================================================================

    async def _transition(
        self, video_id: str, target: VideoStatus, reason: Optional[str] = None
    ) -> Video:
        def apply(video: Any) -> VideoStatus:
            current = video.status
            if not can_transition(current, target):
                raise InvalidOperationError(
                    f"Cannot move video from {current.value} to {target.value}",
                    video_id=video_id,
                    status=current.value,
                )
            video.status = target
            if target == VideoStatus.COMPLETED:
                video.upload_progress = 100
                video.failure_reason = None
            elif target == VideoStatus.FAILED:
                video.failure_reason = reason
            return current

        outcome = await self.video_repo.mutate(video_id, apply)
        if outcome is None:
            raise ResourceNotFoundError("Video", video_id)

        video, previous = outcome
        self.log_info(f"Video {video_id}: {previous.value} -> {target.value}")
        return video

    async def complete_processing(self, video_id: str) -> Video:
        """
        Media is ready: processing -> completed, progress 100

        Raises:
            ResourceNotFoundError: Unknown video
            InvalidOperationError: Video is not processing
        """
        return await self._transition(video_id, VideoStatus.COMPLETED)

    async def fail_processing(self, video_id: str, reason: Optional[str] = None) -> Video:
        """Pipeline error: pending / processing -> failed"""
        video = await self._transition(video_id, VideoStatus.FAILED, reason=reason)
        self.log_warning(f"Processing failed for {video_id}: {reason or 'no reason given'}")
        return video

    async def report_progress(self, video_id: str, percent: int) -> Video:
        """
        Record upload / processing progress; progress never goes backwards

        Raises:
            ValidationError: percent outside 0..100
            InvalidOperationError: Video is not processing
        """
        self.validate_range(percent, "percent", 0, 100)

        def apply(video: Any) -> None:
            if video.status != VideoStatus.PROCESSING:
                raise InvalidOperationError(
                    "Progress can only be reported while processing",
                    video_id=video_id,
                    status=video.status.value,
                )
            video.upload_progress = max(video.upload_progress or 0, percent)

        outcome = await self.video_repo.mutate(video_id, apply)
        if outcome is None:
            raise ResourceNotFoundError("Video", video_id)
        return outcome[0]

    # ========================================================================
    # Reads
    # ========================================================================

    async def get_video(self, video_id: str, viewer_id: Optional[str] = None) -> Video:
        """
        Fetch one video honoring visibility

        Raises:
            ResourceNotFoundError: Unknown video
            PermissionDeniedError: Video is unfinished or private and the
                viewer is not its owner
        """
        video = await self._require_video(video_id)
        if not is_visible_to(video, viewer_id):
            raise PermissionDeniedError("view", "Video", video_id)
        return video

    async def list_videos(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "created_at",
        order: str = "desc",
        category: Optional[str] = None,
        search: Optional[str] = None,
        uploader_id: Optional[str] = None,
        viewer_id: Optional[str] = None,
    ) -> Page[Video]:
        """
        Public listing: completed public videos only. When the viewer asks
        for their own uploads, every one of them is listed.
        """
        params = self.parse_payload(
            ListParams,
            {"page": page, "page_size": page_size, "sort_by": sort_by, "order": order},
        )
        self.validate_sort(params.sort_by, self.video_repo.sortable_fields)

        own_uploads = uploader_id is not None and uploader_id == viewer_id
        videos, total = await self.video_repo.list_videos(
            page=params.page,
            page_size=params.page_size,
            sort_by=params.sort_by,
            order=params.order,
            category=category.strip().lower() if category else None,
            search=search.strip() if search and search.strip() else None,
            owner_id=uploader_id,
            published_only=not own_uploads,
        )
        return Page.build(videos, total, params.page, params.page_size)

    async def list_my_videos(
        self,
        owner_id: str,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Page[Video]:
        """All of an owner's videos, private and unfinished included"""
        return await self.list_videos(
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            order=order,
            uploader_id=owner_id,
            viewer_id=owner_id,
        )

    # ========================================================================
    # Update / Delete
    # ========================================================================

    async def update_video(
        self, video_id: str, actor_id: str, payload: Dict[str, Any]
    ) -> Video:
        """
        Owner edits of title, description, category, tags, is_public

        Raises:
            ValidationError: Bad field values or a field that cannot change
            InvalidOperationError: More tags than allowed
            ResourceNotFoundError: Unknown video
            PermissionDeniedError: Actor is not the owner
        """
        request = self.parse_payload(VideoUpdateRequest, payload)
        self._check_tag_count(request.tags)

        video = await self._require_video(video_id)
        if video.owner_id != actor_id:
            raise PermissionDeniedError("update", "Video", video_id)

        changes = request.model_dump(exclude_none=True)
        if not changes:
            return video

        updated = await self.video_repo.update(video_id, **changes)
        if updated is None:
            raise ResourceNotFoundError("Video", video_id)

        self.log_info(f"Updated video {video_id}: {sorted(changes)}")
        return updated

    async def delete_video(
        self, video_id: str, actor_id: str, is_admin: bool = False
    ) -> bool:
        """
        Delete a video and its comments

        Raises:
            ResourceNotFoundError: Unknown video
            PermissionDeniedError: Actor is neither owner nor admin
        """
        video = await self._require_video(video_id)
        if video.owner_id != actor_id and not is_admin:
            raise PermissionDeniedError("delete", "Video", video_id)

        removed = await self.video_repo.delete_with_comments(video_id)
        self.log_info(
            f"Video {video_id} deleted by {actor_id}{' (admin)' if is_admin else ''}, "
            f"{removed} comments removed"
        )
        return True
