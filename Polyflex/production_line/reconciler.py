"""Production quantity reconciliation for job orders.

Every screen, export and cache refresh that shows produced quantity, waste
or completion for a job order goes through this module.  The functions are
pure: they work on already-fetched job orders and rolls (model instances or
plain mappings) and never touch the database, so the same rules apply to the
cached fields written by the server and to live recalculation at read time.

Quantities are weights in kilograms.  Anything that cannot be read as a
finite number (``None``, blank or non-numeric strings, NaN) counts as zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping


ROLL_RECEIVED = 'Received'

STATUS_NOT_STARTED = 'Not Started'
STATUS_IN_PROGRESS = 'In Progress'
STATUS_COMPLETED = 'Completed'
STATUS_OVERPRODUCED = 'Overproduced'


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a model instance or a mapping."""
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def coerce_quantity(value: Any) -> float:
    """Return ``value`` as a finite float, or ``0.0`` when it is unusable."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, Decimal):
        try:
            result = float(value)
        except (InvalidOperation, ValueError):
            return 0.0
    elif isinstance(value, (int, float)):
        result = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            result = float(text)
        except ValueError:
            return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def _optional_quantity(value: Any) -> float | None:
    """Like :func:`coerce_quantity` but keeps "not recorded" as ``None``."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return coerce_quantity(value)


def _kg(value: float) -> float:
    """Round a weight to the 2 places the job order columns store."""
    return round(value, 2)


def _percentage(part: float, whole: float) -> float:
    if whole > 0:
        return part / whole * 100
    return 0.0


@dataclass(frozen=True)
class ProductionMetrics:
    """Snapshot of a job order's production figures."""

    extruding_total: float
    produced_total: float
    waste_total: float
    completion_pct: float
    waste_pct: float
    production_status: str
    has_data: bool

    @property
    def progress_pct(self) -> float:
        """Completion clamped to 0..100 for progress bars."""
        return max(0.0, min(self.completion_pct, 100.0))

    def as_dict(self) -> dict:
        return {
            'extruding_total': self.extruding_total,
            'produced_total': self.produced_total,
            'waste_total': self.waste_total,
            'completion_pct': self.completion_pct,
            'waste_pct': self.waste_pct,
            'production_status': self.production_status,
            'has_data': self.has_data,
            'progress_pct': self.progress_pct,
        }


def is_received(roll: Any) -> bool:
    return str(_field(roll, 'status', '') or '').strip() == ROLL_RECEIVED


def extruding_total(rolls: Iterable[Any]) -> float:
    return sum((coerce_quantity(_field(r, 'extruding_qty')) for r in rolls), 0.0)


def received_total(rolls: Iterable[Any]) -> float:
    """Sum of cut weight over received rolls only."""
    return sum(
        (coerce_quantity(_field(r, 'cutting_qty')) for r in rolls if is_received(r)),
        0.0,
    )


def stage_totals(rolls: Iterable[Any]) -> dict[str, float]:
    """Return summed ``extruding``/``printing``/``cutting`` weights."""
    totals = {'extruding': 0.0, 'printing': 0.0, 'cutting': 0.0}
    for roll in rolls:
        for stage in totals:
            totals[stage] += coerce_quantity(_field(roll, f'{stage}_qty'))
    return {stage: _kg(total) for stage, total in totals.items()}


def reconcile(
    target_quantity: Any,
    rolls: Iterable[Any],
    *,
    produced_quantity: Any = None,
    waste_quantity: Any = None,
    production_status: str | None = None,
) -> ProductionMetrics:
    """Compute the metrics snapshot for one job order.

    ``produced_quantity`` and ``waste_quantity`` are the cached values stored
    on the job order.  A non-zero cached produced quantity is trusted as is,
    together with the cached waste.  Otherwise both are derived from the
    rolls: produced is the cut weight of received rolls, waste is extruded
    minus produced.  Waste is only attributed once some output has been
    received, so rolls still moving through the line do not count as waste.
    With neither extruded nor produced weight the result is the "no
    production data" state: every total is 0, whatever waste was cached.
    Weights are rounded to the 2 places the cached columns hold.

    ``production_status`` is reported verbatim; it is not derived here.
    """
    rolls = list(rolls or [])
    target = coerce_quantity(target_quantity)
    extruded = _kg(extruding_total(rolls))

    produced = _kg(coerce_quantity(produced_quantity))
    waste = coerce_quantity(waste_quantity)
    if produced == 0 and rolls:
        produced = _kg(received_total(rolls))
        waste = max(0.0, extruded - produced) if produced > 0 else 0.0
    has_data = not (extruded == 0 and produced == 0)
    # No production data is an empty state; a leftover cached waste is not shown
    waste = _kg(max(0.0, waste)) if has_data else 0.0

    status = (production_status or '').strip() or STATUS_NOT_STARTED

    return ProductionMetrics(
        extruding_total=extruded,
        produced_total=produced,
        waste_total=waste,
        completion_pct=_percentage(produced, target),
        waste_pct=_percentage(waste, extruded),
        production_status=status,
        has_data=has_data,
    )


def reconcile_job_order(job_order: Any, rolls: Iterable[Any] | None = None) -> ProductionMetrics:
    """Reconcile a job order against ``rolls`` (its live rolls by default)."""
    if rolls is None:
        manager = _field(job_order, 'rolls')
        rolls = manager.all() if hasattr(manager, 'all') else (manager or [])
    return reconcile(
        _field(job_order, 'quantity'),
        rolls,
        produced_quantity=_field(job_order, 'produced_quantity'),
        waste_quantity=_field(job_order, 'waste_quantity'),
        production_status=_field(job_order, 'production_status'),
    )


def classify_production(produced_total: Any, target_quantity: Any) -> str:
    """Derive the production-status label from produced vs. target weight."""
    produced = coerce_quantity(produced_total)
    target = coerce_quantity(target_quantity)
    if produced <= 0:
        return STATUS_NOT_STARTED
    if produced > target:
        return STATUS_OVERPRODUCED
    if produced == target:
        return STATUS_COMPLETED
    return STATUS_IN_PROGRESS


def recompute_from_rolls(target_quantity: Any, rolls: Iterable[Any]) -> ProductionMetrics:
    """Server-side recomputation: ignore any cache and classify the status.

    This is what gets written back to the job order's cached fields, so a
    later :func:`reconcile` over the same rolls reports identical totals.
    """
    rolls = list(rolls or [])
    base = reconcile(target_quantity, rolls)
    return ProductionMetrics(
        extruding_total=base.extruding_total,
        produced_total=base.produced_total,
        waste_total=base.waste_total,
        completion_pct=base.completion_pct,
        waste_pct=base.waste_pct,
        production_status=classify_production(base.produced_total, target_quantity),
        has_data=base.has_data,
    )


# ---------------------------------------------------------------------------
# Per-roll stage waste
# ---------------------------------------------------------------------------
def stage_waste(from_qty: Any, to_qty: Any) -> float | None:
    """Weight lost between two stages; ``None`` when either is unrecorded."""
    before = _optional_quantity(from_qty)
    after = _optional_quantity(to_qty)
    if before is None or after is None:
        return None
    return max(0.0, before - after)


def stage_waste_pct(from_qty: Any, to_qty: Any) -> float | None:
    waste = stage_waste(from_qty, to_qty)
    if waste is None:
        return None
    before = coerce_quantity(from_qty)
    if before == 0:
        return None
    return waste / before * 100


def printing_waste(roll: Any) -> float | None:
    return stage_waste(_field(roll, 'extruding_qty'), _field(roll, 'printing_qty'))


def cutting_waste(roll: Any) -> float | None:
    """Printing to cutting loss; unprinted rolls are cut straight from extrusion."""
    before = _field(roll, 'printing_qty')
    if _optional_quantity(before) is None:
        before = _field(roll, 'extruding_qty')
    return stage_waste(before, _field(roll, 'cutting_qty'))


def roll_waste(roll: Any) -> float | None:
    """Loss from extrusion to the latest stage the roll has reached.

    ``None`` when the roll was never extruded, ``0`` while it has only been
    extruded.
    """
    extruded = _optional_quantity(_field(roll, 'extruding_qty'))
    if extruded is None:
        return None
    for stage in ('cutting_qty', 'printing_qty'):
        latest = _optional_quantity(_field(roll, stage))
        if latest is not None:
            return max(0.0, extruded - latest)
    return 0.0


def roll_waste_pct(roll: Any) -> float | None:
    extruded = coerce_quantity(_field(roll, 'extruding_qty'))
    if extruded == 0:
        return None
    waste = roll_waste(roll)
    if waste is None:
        return None
    return waste / extruded * 100
