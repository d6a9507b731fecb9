"""
Base Service
Shared logging, validation and pagination helpers for all services
"""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

import pydantic

from src.app.config import Config, get_config
from src.domain.exceptions import ValidationError

PayloadType = TypeVar("PayloadType", bound=pydantic.BaseModel)


class BaseService:
    """
    Base class for services

    Subclasses name themselves through get_service_name(); log lines are
    prefixed with it.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self.logger = logging.getLogger(f"src.services.{self.get_service_name()}")

    def get_service_name(self) -> str:
        raise NotImplementedError

    # ========================================================================
    # Logging
    # ========================================================================

    def log_debug(self, message: str) -> None:
        self.logger.debug(f"[{self.get_service_name()}] {message}")

    def log_info(self, message: str) -> None:
        self.logger.info(f"[{self.get_service_name()}] {message}")

    def log_warning(self, message: str) -> None:
        self.logger.warning(f"[{self.get_service_name()}] {message}")

    # ========================================================================
    # Validation
    # ========================================================================

    def validate_range(
        self, value: int, field_name: str, min_value: int, max_value: int
    ) -> None:
        if value < min_value or value > max_value:
            raise ValidationError(
                f"{field_name} must be between {min_value} and {max_value}",
                field=field_name,
            )

    def validate_sort(self, sort_by: str, allowed: Iterable[str]) -> None:
        allowed = sorted(allowed)
        if sort_by not in allowed:
            raise ValidationError(
                f"Cannot sort by '{sort_by}', expected one of: {', '.join(allowed)}",
                field="sort_by",
            )

    def parse_payload(
        self, model: Type[PayloadType], data: Dict[str, Any]
    ) -> PayloadType:
        """Validate a payload dict, turning pydantic errors into ValidationError"""
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            errors = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            first = errors[0]["field"] if errors else None
            raise ValidationError(
                f"Invalid {model.__name__}", field=first, errors=errors
            ) from e

    # ========================================================================
    # Pagination
    # ========================================================================

    def calculate_pagination(self, page: int, page_size: int) -> Tuple[int, int]:
        """
        Returns:
            (skip, limit)
        """
        self.validate_range(page, "page", 1, 10**9)
        self.validate_range(page_size, "page_size", 1, self.config.content.max_page_size)
        return (page - 1) * page_size, page_size
