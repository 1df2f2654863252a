# -*- coding: utf-8 -*-
import logging
import random
import time
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Max
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .reconciler import ROLL_RECEIVED

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
# Roll quantity columns hold 10 digits with 2 decimal places
MAX_ROLL_WEIGHT = Decimal('100000000')


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def generate_roll_identification() -> str:
    """Return a label such as ``ROLL-1718000000000-417`` for QR printing."""
    return f"ROLL-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def normalize_quantity(value, *, field_label: str) -> Decimal:
    """Validate a weight entered at a stage and round it to 2 places."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(_('%(field)s is required.') % {'field': field_label})
    try:
        qty = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(_('%(field)s must be a number.') % {'field': field_label})
    if not qty.is_finite():
        raise ValidationError(_('%(field)s must be a number.') % {'field': field_label})
    if qty < 0:
        raise ValidationError(_('%(field)s cannot be negative.') % {'field': field_label})
    if qty >= MAX_ROLL_WEIGHT:
        raise ValidationError(_('%(field)s is too large.') % {'field': field_label})
    return qty.quantize(TWO_PLACES)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------
class RollStatus(models.TextChoices):
    """
    Ordered stages of a roll after extrusion.
    """
    FOR_PRINTING  = 'For Printing', _('For printing')
    FOR_CUTTING   = 'For Cutting', _('For cutting')
    FOR_RECEIVING = 'For Receiving', _('For receiving')
    RECEIVED      = ROLL_RECEIVED, _('Received')


class Stage(models.TextChoices):
    EXTRUDING = 'extruding', _('Extruding')
    PRINTING  = 'printing', _('Printing')
    CUTTING   = 'cutting', _('Cutting')
    RECEIVING = 'receiving', _('Receiving')


ROLE_TO_STAGE = {
    'extruder_operator': Stage.EXTRUDING,
    'printing_operator': Stage.PRINTING,
    'cutting_operator':  Stage.CUTTING,
    'warehouse_keeper':  Stage.RECEIVING,
    # 'manager': may perform every stage, handled in utils
}


# ---------------------------------------------------------------------------
# Roll (one physical roll in the job order ledger)
# ---------------------------------------------------------------------------
class Roll(models.Model):
    job_order = models.ForeignKey('job_orders.JobOrder', on_delete=models.CASCADE, related_name='rolls')
    roll_identification = models.CharField(max_length=40, unique=True, blank=True)
    roll_number = models.PositiveIntegerField(blank=True)

    extruding_qty = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    printing_qty = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    cutting_qty = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=RollStatus.choices, default=RollStatus.FOR_PRINTING)
    notes = models.CharField(max_length=200, blank=True, null=True)

    # Audit: who moved the roll through each stage, and when
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rolls_created')
    extruded_at = models.DateTimeField(null=True, blank=True)
    extruded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rolls_extruded')
    printed_at = models.DateTimeField(null=True, blank=True)
    printed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rolls_printed')
    cut_at = models.DateTimeField(null=True, blank=True)
    cut_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rolls_cut')
    received_at = models.DateTimeField(null=True, blank=True)
    received_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rolls_received')

    # -------------------------
    # Stage transitions
    # -------------------------
    def next_stage(self) -> str | None:
        """Return the stage the roll is waiting for, or None once received."""
        if self.extruding_qty is None:
            return Stage.EXTRUDING
        if self.status == RollStatus.FOR_PRINTING:
            if self.job_order.is_printed:
                return Stage.PRINTING
            return Stage.CUTTING
        if self.status == RollStatus.FOR_CUTTING:
            return Stage.CUTTING
        if self.status == RollStatus.FOR_RECEIVING:
            return Stage.RECEIVING
        return None

    def record_extrusion(self, user, qty):
        """Record (or correct) the extruded weight before printing starts."""
        if self.status != RollStatus.FOR_PRINTING or self.printing_qty is not None:
            raise ValidationError(_('Extrusion can only be recorded before the roll is printed.'))
        self.extruding_qty = normalize_quantity(qty, field_label=_('Extruding quantity'))
        self.extruded_by = user
        self.extruded_at = timezone.now()
        self.save(update_fields=['extruding_qty', 'extruded_by', 'extruded_at'])
        logger.info("Roll %s extruded: %s kg", self.roll_identification, self.extruding_qty)

    def record_printing(self, user, qty):
        if self.status != RollStatus.FOR_PRINTING:
            raise ValidationError(_('Only rolls waiting for printing can be printed.'))
        if self.extruding_qty is None:
            raise ValidationError(_('The roll has not been extruded yet.'))
        self.printing_qty = normalize_quantity(qty, field_label=_('Printing quantity'))
        self.printed_by = user
        self.printed_at = timezone.now()
        self.status = RollStatus.FOR_CUTTING
        self.save(update_fields=['printing_qty', 'printed_by', 'printed_at', 'status'])
        logger.info("Roll %s printed: %s kg", self.roll_identification, self.printing_qty)

    def record_cutting(self, user, qty):
        """
        Record the final cut weight.  Rolls of unprinted job orders go to
        cutting straight from extrusion.
        """
        allowed = {RollStatus.FOR_CUTTING}
        if not self.job_order.is_printed:
            allowed.add(RollStatus.FOR_PRINTING)
        if self.status not in allowed:
            raise ValidationError(_('Only rolls waiting for cutting can be cut.'))
        if self.extruding_qty is None:
            raise ValidationError(_('The roll has not been extruded yet.'))
        self.cutting_qty = normalize_quantity(qty, field_label=_('Cutting quantity'))
        self.cut_by = user
        self.cut_at = timezone.now()
        self.status = RollStatus.FOR_RECEIVING
        self.save(update_fields=['cutting_qty', 'cut_by', 'cut_at', 'status'])
        logger.info("Roll %s cut: %s kg", self.roll_identification, self.cutting_qty)

    def mark_received(self, user):
        if self.status != RollStatus.FOR_RECEIVING:
            raise ValidationError(_('Only cut rolls can be received into the warehouse.'))
        self.received_by = user
        self.received_at = timezone.now()
        self.status = RollStatus.RECEIVED
        self.save(update_fields=['received_by', 'received_at', 'status'])
        logger.info("Roll %s received (%s kg)", self.roll_identification, self.cutting_qty)

    def advance(self, user, qty=None) -> str:
        """Perform the next stage transition; returns the stage performed."""
        stage = self.next_stage()
        if stage == Stage.EXTRUDING:
            self.record_extrusion(user, qty)
        elif stage == Stage.PRINTING:
            self.record_printing(user, qty)
        elif stage == Stage.CUTTING:
            self.record_cutting(user, qty)
        elif stage == Stage.RECEIVING:
            self.mark_received(user)
        else:
            raise ValidationError(_('This roll has already been received.'))
        return stage

    # -------------------------
    # Model plumbing
    # -------------------------
    def save(self, *args, **kwargs):
        """
        Assign the label and the next roll number on creation, and keep the
        roll attached to the job order it was created for.
        """
        if self.pk is None:
            if not self.roll_identification:
                self.roll_identification = generate_roll_identification()
            if not self.roll_number:
                last = (Roll.objects
                        .filter(job_order_id=self.job_order_id)
                        .aggregate(m=Max('roll_number'))['m'])
                self.roll_number = (last or 0) + 1
            if self.extruding_qty is not None and self.extruded_at is None:
                self.extruded_at = timezone.now()
                self.extruded_by = self.extruded_by or self.created_by
        else:
            original_job = (Roll.objects
                            .filter(pk=self.pk)
                            .values_list('job_order_id', flat=True)
                            .first())
            if original_job is not None and original_job != self.job_order_id:
                raise ValidationError(_('A roll cannot be moved to another job order.'))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.roll_identification} | JO-{self.job_order_id} #{self.roll_number} | {self.status}"

    class Meta:
        ordering = ['job_order_id', 'roll_number']
        constraints = [
            models.UniqueConstraint(
                fields=['job_order', 'roll_number'],
                name='roll_unique_number_per_job_order',
            ),
        ]
