# src/domain/__init__.py
"""
Domain layer: store contract, result records, payload schemas, pure
engagement rules and the error taxonomy.
"""
from .exceptions import (
    ServiceError,
    ResourceNotFoundError,
    ResourceAlreadyExistsError,
    ResourceConflictError,
    ValidationError,
    InvalidOperationError,
    PermissionDeniedError,
)
from .interfaces import (
    IDocumentStore,
    IUserRepository,
    IVideoRepository,
    ICommentRepository,
)
from .models import (
    LikeToggleResult,
    SubscriptionResult,
    Page,
    ChannelSummary,
    Dashboard,
    ReconciliationReport,
)

__all__ = [
    "ServiceError",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "ResourceConflictError",
    "ValidationError",
    "InvalidOperationError",
    "PermissionDeniedError",
    "IDocumentStore",
    "IUserRepository",
    "IVideoRepository",
    "ICommentRepository",
    "LikeToggleResult",
    "SubscriptionResult",
    "Page",
    "ChannelSummary",
    "Dashboard",
    "ReconciliationReport",
]
