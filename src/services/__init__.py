"""
Services Package
Business logic layer for the video platform core
"""

from .base_service import BaseService
from .user_service import UserService
from .like_service import LikeService
from .subscription_service import SubscriptionService
from .comment_service import CommentService
from .video_service import VideoService
from .engagement_service import EngagementService
from src.domain.exceptions import (
    # Base
    ServiceError,

    # Resource Errors
    ResourceNotFoundError,
    ResourceAlreadyExistsError,
    ResourceConflictError,

    # Validation Errors
    ValidationError,
    InvalidOperationError,

    # Permission Errors
    PermissionDeniedError,

    # Utility Functions
    is_retryable_error,
    error_to_http_status,
)

__all__ = [
    # Base Classes
    "BaseService",

    # Services
    "UserService",
    "LikeService",
    "SubscriptionService",
    "CommentService",
    "VideoService",
    "EngagementService",

    # Exceptions
    "ServiceError",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "ResourceConflictError",
    "ValidationError",
    "InvalidOperationError",
    "PermissionDeniedError",

    # Utility Functions
    "is_retryable_error",
    "error_to_http_status",
]
