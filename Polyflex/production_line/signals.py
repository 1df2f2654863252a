"""Keep job-order cached quantities in step with roll writes."""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


def refresh_job_order(job_order_id: int) -> None:
    """Recompute cached metrics and workflow status for one job order.

    Runs after the roll write has been committed.  A failure here must not
    undo the roll itself; the cache can always be rebuilt with
    ``manage.py refresh_production_metrics``.
    """
    from job_orders.models import JobOrder
    from job_orders.services import refresh_production_quantities, sync_workflow_status

    job_order = JobOrder.objects.filter(pk=job_order_id).first()
    if job_order is None:
        # Job order deleted together with its rolls
        return
    try:
        refresh_production_quantities(job_order)
        sync_workflow_status(job_order)
    except Exception:
        logger.exception("Failed to refresh production quantities for JO-%s", job_order_id)


@receiver(post_save, sender='production_line.Roll')
def roll_saved(sender, instance, **kwargs):
    if kwargs.get('raw'):
        return
    job_order_id = instance.job_order_id
    transaction.on_commit(lambda: refresh_job_order(job_order_id))


@receiver(post_delete, sender='production_line.Roll')
def roll_deleted(sender, instance, **kwargs):
    job_order_id = instance.job_order_id
    transaction.on_commit(lambda: refresh_job_order(job_order_id))
