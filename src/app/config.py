"""
Configuration Management for the VidShare engagement core
Standalone configuration system with environment variable overrides
"""

import yaml
import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional, List
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# ============================================================================
# Core Configuration Classes
# ============================================================================


class DatabaseConfig(BaseSettings):
    """Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="DB_")

    url: str = Field(
        default="sqlite+aiosqlite:///./vidshare.db", description="Async database URL"
    )
    echo: bool = Field(default=False, description="Echo SQL queries")


class LoggingConfig(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (console only when unset)"
    )


class ContentSettings(BaseSettings):
    """Content limits and fixed values shared by the engagement services"""

    model_config = SettingsConfigDict(env_prefix="CONTENT_")

    title_max_length: int = Field(default=100, description="Max video title length")
    description_max_length: int = Field(
        default=5000, description="Max video description length"
    )
    comment_max_length: int = Field(default=1000, description="Max comment length")
    max_tags: int = Field(default=10, description="Max tags per video")
    categories: List[str] = Field(
        default=[
            "gaming",
            "music",
            "education",
            "entertainment",
            "technology",
            "sports",
            "news",
            "other",
        ],
        description="Allowed video categories",
    )
    default_category: str = Field(default="other", description="Fallback category")
    default_thumbnail: str = Field(
        default="/uploads/thumbnails/default-thumbnail.jpg",
        description="Placeholder thumbnail locator",
    )
    redaction_marker: str = Field(
        default="[Comment deleted]", description="Text stored on soft-deleted comments"
    )
    default_page_size: int = Field(default=20, description="Default page size")
    max_page_size: int = Field(default=100, description="Largest page size allowed")

    @field_validator("max_tags")
    @classmethod
    def validate_max_tags(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_tags must be at least 1")
        return v


class ConcurrencySettings(BaseSettings):
    """Optimistic concurrency retry settings"""

    model_config = SettingsConfigDict(env_prefix="CONCURRENCY_")

    retry_attempts: int = Field(
        default=5, description="Attempts per read-modify-write before giving up"
    )
    retry_wait_min: float = Field(
        default=0.01, description="Minimum backoff between attempts (seconds)"
    )
    retry_wait_max: float = Field(
        default=0.5, description="Maximum backoff between attempts (seconds)"
    )

    @field_validator("retry_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v


class CeleryConfig(BaseSettings):
    """Celery Task Queue Configuration"""

    model_config = SettingsConfigDict(env_prefix="CELERY_")

    # Broker Settings
    broker_url: str = Field(
        default="redis://localhost:6379/0",
        description="Celery message broker URL (Redis or RabbitMQ)",
    )
    result_backend: str = Field(
        default="redis://localhost:6379/0",
        description="Task result storage backend URL",
    )

    # Task Serialization
    task_serializer: str = Field(
        default="json", description="Task serialization format"
    )
    result_serializer: str = Field(
        default="json", description="Result serialization format"
    )
    accept_content: List[str] = Field(
        default=["json"], description="Accepted content types"
    )

    # Task Execution Settings
    task_acks_late: bool = Field(
        default=True, description="Acknowledge tasks after completion (safer)"
    )
    task_time_limit: int = Field(
        default=300, description="Hard task timeout in seconds"
    )
    task_default_retry_delay: int = Field(
        default=30, description="Default delay between retries (seconds)"
    )
    task_max_retries: int = Field(
        default=3, description="Maximum retry attempts for failed tasks"
    )

    # Queue Settings
    task_default_queue: str = Field(
        default="default", description="Default task queue name"
    )
    task_routes: dict = Field(
        default={
            "tasks.media.*": {"queue": "media"},
            "tasks.scheduled.*": {"queue": "maintenance"},
        },
        description="Task routing configuration",
    )

    # Beat Scheduler Settings
    reconcile_interval_minutes: int = Field(
        default=15, description="Interval of the subscription reconciliation pass"
    )
    reconcile_batch_size: int = Field(
        default=500, description="Users scanned per reconciliation batch"
    )

    # Logging
    worker_hijack_root_logger: bool = Field(
        default=False, description="Don't hijack root logger"
    )


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Main Application Configuration
    Aggregates all configuration modules with unified access
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize application configuration

        Args:
            config_path: Optional YAML config file path
        """
        self.config_path = config_path or "configs/app.yaml"
        self.yaml_config = self._load_yaml_config()

        self.database = DatabaseConfig()
        self.logging = LoggingConfig()
        self.content = ContentSettings(**self.yaml_config.get("content", {}))
        self.concurrency = ConcurrencySettings(
            **self.yaml_config.get("concurrency", {})
        )
        self.celery = CeleryConfig()

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.debug(f"Config file not found: {config_file}, using defaults")
            return {}

        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def to_dict(self) -> Dict[str, Any]:
        """Export full configuration as dictionary"""
        return {
            "database": self.database.model_dump(),
            "logging": self.logging.model_dump(),
            "content": self.content.model_dump(),
            "concurrency": self.concurrency.model_dump(),
            "celery": self.celery.model_dump(),
        }

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary"""
        return {
            "app": self.yaml_config.get("app", {}),
            "database": {"url": self.database.url},
            "content": {
                "max_tags": self.content.max_tags,
                "categories": len(self.content.categories),
                "max_page_size": self.content.max_page_size,
            },
            "concurrency": {
                "retry_attempts": self.concurrency.retry_attempts,
            },
            "celery": {
                "broker": self.celery.broker_url,
                "reconcile_interval_minutes": self.celery.reconcile_interval_minutes,
            },
        }


# ============================================================================
# Global Configuration Instance (Singleton)
# ============================================================================

_config: Optional[Config] = None
_config_lock = threading.Lock()


@lru_cache()
def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get or create global configuration instance (Thread-safe singleton)

    Args:
        config_path: Optional path to config file

    Returns:
        Config instance
    """
    global _config

    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config(config_path)
                logger.info("✅ Configuration initialized")

    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """Force reload configuration"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = Config(config_path)
        logger.info("🔄 Configuration reloaded")

    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = None
        logger.info("🗑️ Configuration reset")


# ============================================================================
# Configuration Validation
# ============================================================================


def validate_config(config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Validate configuration

    Args:
        config: Config instance (uses global if None)

    Returns:
        Validation result with errors and warnings
    """
    if config is None:
        config = get_config()

    errors = []
    warnings = []

    if not config.database.url:
        errors.append("Database URL not configured")
    elif "+aiosqlite" not in config.database.url and "+asyncpg" not in config.database.url:
        warnings.append(
            f"Database URL does not name an async driver: {config.database.url}"
        )

    if config.content.default_category not in config.content.categories:
        errors.append(
            f"Default category '{config.content.default_category}' is not an allowed category"
        )

    if config.content.default_page_size > config.content.max_page_size:
        errors.append("default_page_size exceeds max_page_size")

    if config.concurrency.retry_wait_min > config.concurrency.retry_wait_max:
        errors.append("retry_wait_min exceeds retry_wait_max")

    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        if not log_path.parent.exists():
            warnings.append(f"Log directory will be created: {log_path.parent}")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


# ============================================================================
# Convenience Functions
# ============================================================================


def get_db_settings() -> DatabaseConfig:
    """Get database settings (shortcut)"""
    return get_config().database


def get_content_settings() -> ContentSettings:
    """Get content settings (shortcut)"""
    return get_config().content


def get_concurrency_settings() -> ConcurrencySettings:
    """Get concurrency settings (shortcut)"""
    return get_config().concurrency


def setup_logging(config: Optional[Config] = None) -> None:
    """
    Setup logging based on configuration

    Args:
        config: Config instance (uses global if None)
    """
    import logging.handlers

    if config is None:
        config = get_config()

    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(config.logging.format))
    root_logger.addHandler(console_handler)

    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(config.logging.format))
        root_logger.addHandler(file_handler)

    logger.info(f"📝 Logging configured: level={config.logging.level}")
