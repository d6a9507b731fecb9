"""
Background Tasks Package
Celery-based asynchronous task processing
"""

from src.infrastructure.tasks.celery_app import celery_app

# Import all task modules to register them
from src.infrastructure.tasks import (
    media_tasks,
    scheduled_tasks,
)

__all__ = [
    "celery_app",
    "media_tasks",
    "scheduled_tasks",
]
