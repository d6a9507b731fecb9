# src/domain/interfaces.py
"""
Content store contract (Protocols).

Services are written against these; the SQLAlchemy repositories satisfy
them via duck typing, there is no inheritance requirement.
"""
from __future__ import annotations

from typing import (
    Any,
    Callable,
    Iterable,
    List,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from src.app.models import Comment, User, Video

Mutator = Callable[[Any], Any]


@runtime_checkable
class IDocumentStore(Protocol):
    """Per-entity CRUD shared by every document type."""

    sortable_fields: Tuple[str, ...]

    async def create(self, **values: Any) -> Any: ...

    async def get_by_id(self, id: str) -> Optional[Any]: ...

    async def get_many(self, ids: Iterable[str]) -> List[Any]: ...

    async def exists(self, id: str) -> bool: ...

    async def mutate(
        self, id: str, mutator: Mutator
    ) -> Optional[Tuple[Any, Any]]:
        """Atomic read-modify-write of one document; None if it is missing."""
        ...

    async def update(self, id: str, **values: Any) -> Optional[Any]: ...

    async def delete(self, id: str) -> bool: ...


@runtime_checkable
class IUserRepository(IDocumentStore, Protocol):
    async def get_by_username(self, username: str) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]: ...

    async def list_ids_after(self, after_id: Optional[str], limit: int) -> List[str]: ...


@runtime_checkable
class IVideoRepository(IDocumentStore, Protocol):
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
    ) -> Tuple[List[Video], int]: ...

    async def published_by_owner(self, owner_id: str) -> List[Video]: ...

    async def increment_views(self, video_id: str) -> Optional[int]: ...

    async def stats_for_owner(self, owner_id: str) -> dict: ...

    async def delete_with_comments(self, video_id: str) -> int: ...


@runtime_checkable
class ICommentRepository(IDocumentStore, Protocol):
    async def list_top_level(
        self,
        video_id: str,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Tuple[List[Comment], int]: ...

    async def visible_replies(self, parent: Comment) -> List[Comment]: ...


__all__ = [
    "IDocumentStore",
    "IUserRepository",
    "IVideoRepository",
    "ICommentRepository",
]
