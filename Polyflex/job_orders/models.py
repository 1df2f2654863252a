"""Models for the job_orders app.

A ``JobOrder`` is a production work order: it names the bag item to be
produced and the target weight.  Rolls recorded against it (see
``production_line.models.Roll``) make up the production ledger from which
produced quantity, waste and completion are derived.  The three cached
columns below are refreshed from that ledger by
``job_orders.services.refresh_production_quantities`` whenever rolls change;
readers that need live figures call :meth:`JobOrder.metrics`.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from production_line.reconciler import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    STATUS_OVERPRODUCED,
    ProductionMetrics,
    reconcile_job_order,
)


class ProductionStatus(models.TextChoices):
    NOT_STARTED = STATUS_NOT_STARTED, 'Not Started'
    IN_PROGRESS = STATUS_IN_PROGRESS, 'In Progress'
    COMPLETED = STATUS_COMPLETED, 'Completed'
    OVERPRODUCED = STATUS_OVERPRODUCED, 'Overproduced'


class JobOrder(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    customer_name = models.CharField(max_length=150, blank=True)
    item_description = models.CharField(max_length=200, blank=True)
    size_details = models.CharField(max_length=100, blank=True)
    thickness = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    is_printed = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    # Target weight (kg)
    quantity = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    # Cached from the roll ledger; may lag behind it
    produced_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    waste_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    production_status = models.CharField(
        max_length=20,
        choices=ProductionStatus.choices,
        default=ProductionStatus.NOT_STARTED,
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        label = self.item_description or self.customer_name or '-'
        return f"JO-{self.pk} {label} ({self.quantity} kg)"

    def metrics(self, rolls=None) -> ProductionMetrics:
        """Live production figures against ``rolls`` (all rolls by default)."""
        return reconcile_job_order(self, rolls)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Job Order'
        verbose_name_plural = 'Job Orders'
