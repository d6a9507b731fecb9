"""
Media Pipeline Tasks
Completion / failure signals sent by the external media pipeline
"""

import logging
from typing import Any, Dict, Optional

from src.app.config import get_config
from src.app.dependencies import Services, service_scope
from src.domain.exceptions import ResourceConflictError, ServiceError
from src.infrastructure.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

_max_retries = get_config().celery.task_max_retries


def _video_result(video: Any) -> Dict[str, Any]:
    return {
        "video_id": video.id,
        "applied": True,
        "status": video.status.value,
        "upload_progress": video.upload_progress,
    }


def _rejected(video_id: str, error: ServiceError) -> Dict[str, Any]:
    # Duplicate or late signals are expected; report them instead of retrying
    logger.warning(f"⚠️ Media signal for {video_id} rejected: {error.message}")
    return {"video_id": video_id, "applied": False, "error": error.to_dict()}


async def mark_completed(services: Services, video_id: str) -> Dict[str, Any]:
    """processing -> completed"""
    try:
        video = await services.videos.complete_processing(video_id)
    except ResourceConflictError:
        raise
    except ServiceError as e:
        return _rejected(video_id, e)
    return _video_result(video)


async def mark_failed(
    services: Services, video_id: str, reason: Optional[str] = None
) -> Dict[str, Any]:
    """pending / processing -> failed"""
    try:
        video = await services.videos.fail_processing(video_id, reason=reason)
    except ResourceConflictError:
        raise
    except ServiceError as e:
        return _rejected(video_id, e)
    return _video_result(video)


@celery_app.task(
    bind=True,
    name="tasks.media.complete_processing",
    max_retries=_max_retries,
)
def complete_processing(self, video_id: str) -> Dict[str, Any]:
    """
    Media is ready for playback

    Args:
        video_id: Video ID

    Returns:
        Transition result
    """
    logger.info(f"🎬 Completing processing of video: {video_id}")

    async def _complete():
        async with service_scope() as services:
            return await mark_completed(services, video_id)

    try:
        return self.run_async(_complete())
    except ResourceConflictError as e:
        raise self.retry(exc=e)


@celery_app.task(
    bind=True,
    name="tasks.media.fail_processing",
    max_retries=_max_retries,
)
def fail_processing(self, video_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
    """
    Media pipeline gave up on the video

    Args:
        video_id: Video ID
        reason: Pipeline error message

    Returns:
        Transition result
    """
    logger.info(f"💥 Failing processing of video: {video_id}")

    async def _fail():
        async with service_scope() as services:
            return await mark_failed(services, video_id, reason)

    try:
        return self.run_async(_fail())
    except ResourceConflictError as e:
        raise self.retry(exc=e)
