from django.conf import settings
from django.contrib.auth.decorators import login_required, user_passes_test
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from job_orders.models import JobOrder, ProductionStatus
from job_orders.services import metrics_for
from production_line.reconciler import (
    cutting_waste,
    printing_waste,
    reconcile_job_order,
    stage_totals,
)
from production_line.utils import can_view_production, is_manager_or_accountant, role_required
from utils.xlsx import build_table_response

OPEN_STATUSES = ('pending', 'in_progress')


def _gather_production_metrics(job_orders):
    """Aggregate per-job-order metrics into dashboard totals."""
    rows = metrics_for(job_orders)
    totals = {
        'job_orders': len(rows),
        'target': 0.0,
        'extruded': 0.0,
        'produced': 0.0,
        'waste': 0.0,
        'without_data': 0,
    }
    by_status = {value: 0 for value, _ in ProductionStatus.choices}
    for jo, m in rows:
        totals['target'] += float(jo.quantity)
        totals['extruded'] += m.extruding_total
        totals['produced'] += m.produced_total
        totals['waste'] += m.waste_total
        if not m.has_data:
            totals['without_data'] += 1
        by_status[m.production_status] = by_status.get(m.production_status, 0) + 1
    totals['waste_pct'] = (totals['waste'] / totals['extruded'] * 100) if totals['extruded'] > 0 else 0.0
    return rows, totals, by_status


@require_GET
@login_required(login_url="/admin/login/")
@role_required(can_view_production)
def metrics_api(request):
    """
    Lightweight JSON endpoint for live dashboard refresh.

    Dashboards poll this endpoint every ``poll_interval`` seconds; each call
    recomputes the figures of all open job orders from their rolls.
    """
    job_orders = JobOrder.objects.filter(status__in=OPEN_STATUSES).order_by('-created_at', '-id')
    rows, totals, by_status = _gather_production_metrics(job_orders)
    data = {
        'poll_interval': settings.PRODUCTION_POLL_INTERVAL_SECONDS,
        'totals': totals,
        'production_status_counts': by_status,
        'job_orders': [
            {
                'id': jo.id,
                'label': str(jo),
                'quantity': float(jo.quantity),
                'status': jo.status,
                **m.as_dict(),
            }
            for jo, m in rows
        ],
    }
    return JsonResponse(data)


@require_GET
@login_required(login_url="/admin/login/")
@user_passes_test(is_manager_or_accountant)
def waste_report_export(request):
    """
    Waste per job order, split by stage: extrusion to printing and printing
    (or extrusion, for unprinted orders) to cutting.
    """
    job_orders = JobOrder.objects.prefetch_related('rolls').order_by('-created_at', '-id')
    status_filter = (request.GET.get('status') or '').strip()
    if status_filter:
        job_orders = job_orders.filter(status=status_filter)

    headers = [
        'Job order',
        'Customer',
        'Rolls',
        'Extruded (kg)',
        'Printed (kg)',
        'Cut (kg)',
        'Printing waste (kg)',
        'Cutting waste (kg)',
        'Total waste (kg)',
        'Waste %',
    ]
    rows = []
    for jo in job_orders:
        rolls = list(jo.rolls.all())
        stages = stage_totals(rolls)
        metrics = reconcile_job_order(jo, rolls)
        rows.append([
            f"JO-{jo.id}",
            jo.customer_name,
            len(rolls),
            round(stages['extruding'], 2),
            round(stages['printing'], 2),
            round(stages['cutting'], 2),
            round(sum(w for w in map(printing_waste, rolls) if w is not None), 2),
            round(sum(w for w in map(cutting_waste, rolls) if w is not None), 2),
            round(metrics.waste_total, 2),
            round(metrics.waste_pct, 2),
        ])

    return build_table_response(
        sheet_title="Waste",
        report_title="Production waste report",
        headers=headers,
        rows=rows,
        filename="waste_report.xlsx",
        table_name="Waste",
    )
