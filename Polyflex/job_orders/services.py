"""Job-order domain services."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Tuple

from django.db import transaction
from django.db.models import Prefetch

from production_line.models import Roll
from production_line.reconciler import (
    ProductionMetrics,
    coerce_quantity,
    extruding_total,
    recompute_from_rolls,
)

from .models import JobOrder

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def _as_decimal(value: float) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES)


def refresh_production_quantities(job_order: JobOrder) -> ProductionMetrics:
    """Rebuild the cached produced/waste/status columns from the roll ledger.

    The job order row is locked while its rolls are read so that two
    refreshes of the same job order do not interleave.  Only the columns
    whose value changed are written.
    """
    with transaction.atomic():
        locked = JobOrder.objects.select_for_update().get(pk=job_order.pk)
        rolls = list(Roll.objects.filter(job_order=locked))
        metrics = recompute_from_rolls(locked.quantity, rolls)

        updates = {
            'produced_quantity': _as_decimal(metrics.produced_total),
            'waste_quantity': _as_decimal(metrics.waste_total),
            'production_status': metrics.production_status,
        }
        changed = [name for name, value in updates.items() if getattr(locked, name) != value]
        for name, value in updates.items():
            setattr(locked, name, value)
            setattr(job_order, name, value)
        if changed:
            locked.save(update_fields=changed)
    logger.debug("Refreshed JO-%s: %s", job_order.pk, metrics.as_dict())
    return metrics


def sync_workflow_status(job_order: JobOrder) -> str:
    """Move the workflow status along with the extruded weight.

    Nothing extruded leaves the status untouched; a partly extruded job order
    is ``in_progress`` and one whose target has been fully extruded is
    ``completed``.  Cancelled job orders are never reopened.
    """
    if job_order.status == 'cancelled':
        return job_order.status
    extruded = extruding_total(Roll.objects.filter(job_order=job_order).only('extruding_qty'))
    new_status = job_order.status
    if extruded > 0:
        remaining = coerce_quantity(job_order.quantity) - extruded
        new_status = 'completed' if remaining <= 0 else 'in_progress'
    if new_status != job_order.status:
        job_order.status = new_status
        job_order.save(update_fields=['status'])
    return new_status


def metrics_for(job_orders: Iterable[JobOrder]) -> List[Tuple[JobOrder, ProductionMetrics]]:
    """Reconcile many job orders with a single prefetch of their rolls."""
    if hasattr(job_orders, 'prefetch_related'):
        job_orders = job_orders.prefetch_related(
            Prefetch('rolls', queryset=Roll.objects.only(
                'id', 'job_order_id', 'roll_number', 'extruding_qty',
                'printing_qty', 'cutting_qty', 'status',
            ))
        )
    return [(jo, jo.metrics()) for jo in job_orders]


def delete_job_order_completely(job_order: JobOrder) -> tuple[int, int]:
    """Remove a job order together with its rolls.

    Returns ``(rolls_deleted, job_orders_deleted)`` so callers can aggregate
    counters.
    """
    with transaction.atomic():
        rolls_deleted = Roll.objects.filter(job_order=job_order).count()
        job_order.delete()
    return (rolls_deleted, 1)
