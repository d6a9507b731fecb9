# src/infrastructure/tasks/celery_app.py
"""
Celery Application Factory
Creates and configures Celery app with project settings
"""

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from celery import Celery, Task
from celery.signals import setup_logging as celery_setup_logging
from celery.signals import task_failure, task_postrun, task_prerun
from kombu import Exchange, Queue

from src.app.config import get_config, setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseTask(Task):
    """
    Base task class with database session management
    Each run gets a fresh event loop; the engine is disposed afterwards so
    no pooled connection outlives the loop it was opened on.
    """

    _db = None

    @property
    def db(self):
        """Get database manager (lazy initialization)"""
        if self._db is None:
            from src.app.database import db_manager

            self._db = db_manager
        return self._db

    def run_async(self, coro: Awaitable[T]) -> T:
        async def _run() -> Any:
            try:
                return await coro
            finally:
                await self.db.close()

        return asyncio.run(_run())


def create_celery_app(app_name: str = "vidshare") -> Celery:
    """
    Create and configure Celery application

    Args:
        app_name: Application name for Celery

    Returns:
        Configured Celery instance
    """
    config = get_config()
    celery_config = config.celery

    celery_app = Celery(
        app_name,
        broker=celery_config.broker_url,
        backend=celery_config.result_backend,
        task_cls=DatabaseTask,
        include=[
            "src.infrastructure.tasks.media_tasks",
            "src.infrastructure.tasks.scheduled_tasks",
        ],
    )

    celery_app.conf.update(
        # Serialization
        task_serializer=celery_config.task_serializer,
        result_serializer=celery_config.result_serializer,
        accept_content=celery_config.accept_content,
        # Task execution
        task_time_limit=celery_config.task_time_limit,
        task_acks_late=celery_config.task_acks_late,
        # Retry settings
        task_default_retry_delay=celery_config.task_default_retry_delay,
        # Logging
        worker_hijack_root_logger=celery_config.worker_hijack_root_logger,
        # Timezone
        timezone="UTC",
        enable_utc=True,
        # Task routing
        task_default_queue=celery_config.task_default_queue,
        task_routes=celery_config.task_routes,
    )

    default_exchange = Exchange("default", type="direct")
    celery_app.conf.task_queues = (
        Queue("default", exchange=default_exchange, routing_key="default"),
        Queue("media", exchange=default_exchange, routing_key="media"),
        Queue("maintenance", exchange=default_exchange, routing_key="maintenance"),
    )

    logger.info(f"✅ Celery app initialized: {app_name}")
    logger.info(f"📡 Broker: {celery_config.broker_url}")

    return celery_app


# Create global Celery instance
celery_app = create_celery_app()


# ============================================================================
# Signal Handlers
# ============================================================================


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Workers log through the project handlers instead of Celery's defaults"""
    setup_logging(get_config())


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, **extra):
    logger.info(f"🚀 Task started: {task.name} [ID: {task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, state=None, **extra):
    logger.info(f"✅ Task finished: {task.name} [ID: {task_id}] state={state}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **kwargs):
    logger.error(f"❌ Task failed: {sender.name} [ID: {task_id}]: {exception}")
