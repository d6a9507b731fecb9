"""
Scheduled Background Tasks
Periodic tasks using Celery Beat
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from celery.schedules import crontab

from src.app.config import get_config
from src.app.dependencies import service_scope
from src.infrastructure.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="tasks.scheduled.reconcile_subscriptions")
def reconcile_subscriptions(self, batch_size: Optional[int] = None) -> Dict[str, Any]:
    """
    Repair one-sided subscription edges and drifted subscriber counts

    Args:
        batch_size: Users per batch (config default if omitted)

    Returns:
        Reconciliation totals
    """

    async def _reconcile():
        logger.info("🔗 Reconciling subscription graph...")
        async with service_scope() as services:
            report = await services.subscriptions.reconcile_all(batch_size=batch_size)
        return asdict(report)

    result = self.run_async(_reconcile())
    logger.info(
        f"✅ Reconciliation done: {result['users_scanned']} users, "
        f"{result['edges_repaired']} edges repaired"
    )
    return result


# ============================================================================
# Beat Schedule Configuration
# ============================================================================

_interval = get_config().celery.reconcile_interval_minutes

celery_app.conf.beat_schedule = {
    "reconcile-subscriptions": {
        "task": "tasks.scheduled.reconcile_subscriptions",
        "schedule": crontab(minute=f"*/{_interval}"),
    },
}
