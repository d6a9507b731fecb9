# src/infrastructure/repositories/base.py
"""
Base Repository Pattern
Provides generic CRUD operations and the optimistic read-modify-write
primitive for all documents
"""

import inspect
import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    cast,
)

from sqlalchemy import Select, asc, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.orm.exc import StaleDataError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from src.app.config import get_concurrency_settings
from src.domain.exceptions import ResourceConflictError

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")
ResultType = TypeVar("ResultType")

Mutator = Callable[[Any], Union[ResultType, Awaitable[ResultType]]]


class BaseRepository(Generic[ModelType]):
    """
    Abstract Repository with generic CRUD operations

    Every document carries a version column; a flush against a stale
    version raises StaleDataError, which mutate() retries.

    Usage:
        class VideoRepository(BaseRepository[Video]):
            def __init__(self, session: AsyncSession):
                super().__init__(session, Video)
    """

    sortable_fields: Tuple[str, ...] = ("created_at",)

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """
        Initialize repository

        Args:
            session: Database session
            model: SQLAlchemy model class
        """
        self.session = session
        self.model = model

    def _id_col(self) -> InstrumentedAttribute:
        return cast(InstrumentedAttribute, getattr(self.model, "id"))

    def _retrying(self) -> AsyncRetrying:
        settings = get_concurrency_settings()
        return AsyncRetrying(
            retry=retry_if_exception_type(StaleDataError),
            stop=stop_after_attempt(settings.retry_attempts),
            wait=wait_random_exponential(
                multiplier=settings.retry_wait_min, max=settings.retry_wait_max
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    # ========================================================================
    # CREATE Operations
    # ========================================================================

    async def create(self, **kwargs) -> ModelType:
        """
        Create new entity

        Args:
            **kwargs: Model attributes

        Returns:
            Created model instance
        """
        try:
            instance: ModelType = cast(Any, self.model)(**kwargs)
            self.session.add(instance)
            await self.session.commit()
            await self.session.refresh(instance)
            logger.info(f"✅ Created {self.model.__name__}: {getattr(instance, 'id')}")
            return instance
        except Exception as e:
            await self.session.rollback()
            logger.error(f"❌ Failed to create {self.model.__name__}: {e}")
            raise

    # ========================================================================
    # READ Operations
    # ========================================================================

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get entity by ID, always reloading current column values

        Args:
            id: Entity ID

        Returns:
            Model instance or None
        """
        try:
            result = await self.session.get(self.model, id, populate_existing=True)
            return cast(Optional[ModelType], result)
        except Exception as e:
            logger.error(f"❌ Failed to get {self.model.__name__} by ID: {e}")
            raise

    async def get_many(self, ids: Iterable[str]) -> List[ModelType]:
        """
        Fetch several entities, keeping the order of `ids` and skipping
        ids that no longer exist
        """
        ids = list(ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(self.model)
            .where(self._id_col().in_(ids))
            .execution_options(populate_existing=True)
        )
        by_id = {getattr(row, "id"): row for row in result.scalars().all()}
        return [by_id[i] for i in ids if i in by_id]

    async def count(self, **filters) -> int:
        """
        Count entities matching filters

        Args:
            **filters: Filter conditions

        Returns:
            Count of matching records
        """
        query = select(func.count()).select_from(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)

        result = await self.session.execute(query)
        return int(result.scalar_one_or_none() or 0)

    async def exists(self, id: str) -> bool:
        stmt = select(func.count()).select_from(self.model).where(self._id_col() == id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one_or_none() or 0) > 0

    async def find_one_by(self, **filters) -> Optional[ModelType]:
        """
        Find single entity by filters

        Args:
            **filters: Field-value pairs to filter by

        Returns:
            First matching model instance or None
        """
        query = select(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)

        result = await self.session.execute(query.limit(1))
        return result.scalars().first()

    async def paginate(
        self,
        query: Select,
        page: int,
        page_size: int,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Tuple[List[ModelType], int]:
        """
        Run `query` for one page

        Returns:
            (items on the page, total matching rows)
        """
        try:
            count_query = select(func.count()).select_from(
                query.order_by(None).subquery()
            )
            total = int((await self.session.execute(count_query)).scalar_one() or 0)

            column = getattr(self.model, sort_by)
            ordering = asc(column) if order == "asc" else desc(column)
            page_query = (
                query.order_by(ordering, self._id_col())
                .offset((page - 1) * page_size)
                .limit(page_size)
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(page_query)
            return list(result.scalars().all()), total
        except Exception as e:
            logger.error(f"❌ Failed to paginate {self.model.__name__}: {e}")
            raise

    # ========================================================================
    # UPDATE Operations
    # ========================================================================

    async def mutate(
        self, id: str, mutator: Mutator
    ) -> Optional[Tuple[ModelType, Any]]:
        """
        Optimistic read-modify-write of one document

        The document is reloaded, handed to `mutator` (sync or async), and
        committed. A concurrent commit in between makes the version check
        fail; the whole cycle then runs again against the fresh row.
        Mutators must therefore be pure functions of the rows they read.
        An async mutator may load and change other documents through the same
        session; they are flushed in the same commit and version-checked
        together.

        Args:
            id: Entity ID
            mutator: Callable applied to the loaded instance

        Returns:
            (instance, mutator result), or None when the entity is missing

        Raises:
            ResourceConflictError: version check kept failing
        """
        try:
            async for attempt in self._retrying():
                with attempt:
                    instance = await self.session.get(
                        self.model, id, populate_existing=True
                    )
                    if instance is None:
                        return None
                    try:
                        outcome = mutator(instance)
                        if inspect.isawaitable(outcome):
                            outcome = await outcome
                        await self.session.commit()
                    except Exception:
                        await self.session.rollback()
                        raise
                    await self.session.refresh(instance)
                    return instance, outcome
        except StaleDataError as e:
            logger.error(
                f"❌ Gave up updating {self.model.__name__} {id} after concurrent writes: {e}"
            )
            raise ResourceConflictError(self.model.__name__, id) from e
        return None

    async def update(self, id: str, **kwargs) -> Optional[ModelType]:
        """
        Update entity fields by ID (version-checked)

        Args:
            id: Entity ID
            **kwargs: Fields to update

        Returns:
            Updated model instance or None
        """

        def apply(instance: ModelType) -> None:
            for key, value in kwargs.items():
                setattr(instance, key, value)

        outcome = await self.mutate(id, apply)
        if outcome is None:
            return None
        logger.info(f"✅ Updated {self.model.__name__}: {id}")
        return outcome[0]

    # ========================================================================
    # DELETE Operations
    # ========================================================================

    async def delete(self, id: str) -> bool:
        """
        Delete entity by ID

        Args:
            id: Entity ID

        Returns:
            True if deleted, False if not found
        """
        try:
            result = await self.session.execute(
                delete(self.model).where(self._id_col() == id)
            )
            await self.session.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"✅ Deleted {self.model.__name__}: {id}")
            else:
                logger.warning(f"⚠️ {self.model.__name__} not found for deletion: {id}")

            return deleted
        except Exception as e:
            await self.session.rollback()
            logger.error(f"❌ Failed to delete {self.model.__name__}: {e}")
            raise
