"""Views for the job_orders app.

List, detail, create, refresh, bulk delete and XLSX export endpoints for job
orders.  Every figure shown here comes from the reconciler through
``JobOrder.metrics`` or ``services.metrics_for``; nothing in this module
computes produced quantity or waste on its own.
"""

from __future__ import annotations

from django.contrib.auth.decorators import login_required, user_passes_test
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from production_line.reconciler import ProductionMetrics, cutting_waste, printing_waste
from production_line.utils import can_view_production, is_manager_or_accountant, role_required
from production_line.views import roll_payload
from utils.xlsx import build_table_response
from .forms import JobOrderForm
from .models import JobOrder, ProductionStatus
from .services import (
    delete_job_order_completely,
    metrics_for,
    refresh_production_quantities,
    sync_workflow_status,
)


def _filtered_job_orders(request):
    """Apply the ``status``/``production_status``/``search`` query filters."""
    status_filter = (request.GET.get('status') or '').strip()
    production_filter = (request.GET.get('production_status') or '').strip()
    search_query = (request.GET.get('search') or '').strip()

    qs = JobOrder.objects.all()
    if status_filter:
        qs = qs.filter(status=status_filter)
    if production_filter:
        qs = qs.filter(production_status=production_filter)
    if search_query:
        cond = (
            Q(customer_name__icontains=search_query) |
            Q(item_description__icontains=search_query) |
            Q(size_details__icontains=search_query)
        )
        digits = search_query.upper().removeprefix('JO-')
        if digits.isdigit():
            cond |= Q(pk=int(digits))
        qs = qs.filter(cond)
    return qs.order_by('-created_at', '-id')


def job_order_payload(job_order: JobOrder, metrics: ProductionMetrics) -> dict:
    return {
        'id': job_order.id,
        'customer_name': job_order.customer_name,
        'item_description': job_order.item_description,
        'size_details': job_order.size_details,
        'thickness': float(job_order.thickness) if job_order.thickness is not None else None,
        'is_printed': job_order.is_printed,
        'quantity': float(job_order.quantity),
        'status': job_order.status,
        'created_at': job_order.created_at.isoformat() if job_order.created_at else None,
        'metrics': metrics.as_dict(),
    }


@require_GET
@login_required
@role_required(can_view_production)
def job_order_list_view(request):
    """Job orders with their live production metrics."""
    rows = metrics_for(_filtered_job_orders(request))
    return JsonResponse({
        'results': [job_order_payload(jo, m) for jo, m in rows],
        'count': len(rows),
        'status_choices': JobOrder.STATUS_CHOICES,
        'production_status_choices': ProductionStatus.choices,
    })


@require_GET
@login_required
@role_required(can_view_production)
def job_order_detail_view(request, pk: int):
    job_order = get_object_or_404(JobOrder, pk=pk)
    rolls = list(
        job_order.rolls.select_related('created_by', 'extruded_by', 'printed_by', 'cut_by', 'received_by')
        .order_by('roll_number')
    )
    payload = job_order_payload(job_order, job_order.metrics(rolls))
    payload['notes'] = job_order.notes
    payload['cached'] = {
        'produced_quantity': float(job_order.produced_quantity),
        'waste_quantity': float(job_order.waste_quantity),
        'production_status': job_order.production_status,
    }
    payload['rolls'] = [
        {**roll_payload(r), 'printing_waste': printing_waste(r), 'cutting_waste': cutting_waste(r)}
        for r in rolls
    ]
    return JsonResponse(payload)


@require_POST
@login_required
@role_required(is_manager_or_accountant)
def job_order_add_view(request):
    """Create a job order from POSTed form data."""
    form = JobOrderForm(request.POST)
    if not form.is_valid():
        errors = {f: [str(e) for e in errs] for f, errs in form.errors.items()}
        return JsonResponse({'ok': False, 'errors': errors}, status=400)
    job_order = form.save()
    return JsonResponse({'ok': True, 'job_order': job_order_payload(job_order, job_order.metrics())}, status=201)


@require_POST
@login_required
@role_required(is_manager_or_accountant)
def job_order_refresh_view(request, pk: int):
    """Rebuild the cached production columns of one job order from its rolls."""
    job_order = get_object_or_404(JobOrder, pk=pk)
    metrics = refresh_production_quantities(job_order)
    sync_workflow_status(job_order)
    return JsonResponse({'ok': True, 'job_order': job_order_payload(job_order, metrics)})


@require_POST
@login_required
@role_required(is_manager_or_accountant)
def job_order_bulk_delete_view(request):
    """Delete multiple job orders (and their rolls) at once via POST."""
    ids = [i for i in request.POST.getlist('ids') if str(i).isdigit()]
    job_orders = list(JobOrder.objects.filter(pk__in=ids))
    if not job_orders:
        return JsonResponse({'ok': False, 'error': 'nothing selected'}, status=400)

    deleted = 0
    removed_rolls = 0
    for job_order in job_orders:
        rolls_deleted, job_deleted = delete_job_order_completely(job_order)
        deleted += job_deleted
        removed_rolls += rolls_deleted
    return JsonResponse({'ok': True, 'deleted': deleted, 'rolls_deleted': removed_rolls})


@require_GET
@login_required
@user_passes_test(is_manager_or_accountant)
def job_orders_list_export_xlsx(request):
    """Export the filtered job order list with production figures to XLSX."""
    rows_in = metrics_for(_filtered_job_orders(request))

    def fmt_dt(value):
        if not value:
            return ''
        return timezone.localtime(value).strftime('%Y-%m-%d %H:%M')

    headers = [
        'Job order',
        'Customer',
        'Item',
        'Target (kg)',
        'Extruded (kg)',
        'Produced (kg)',
        'Waste (kg)',
        'Completion %',
        'Waste %',
        'Production status',
        'Status',
        'Created',
    ]
    rows = []
    for jo, m in rows_in:
        rows.append([
            f"JO-{jo.id}",
            jo.customer_name,
            jo.item_description,
            jo.quantity,
            round(m.extruding_total, 2),
            round(m.produced_total, 2),
            round(m.waste_total, 2),
            round(m.completion_pct, 2),
            round(m.waste_pct, 2),
            m.production_status,
            jo.get_status_display(),
            fmt_dt(jo.created_at),
        ])

    return build_table_response(
        sheet_title="Job orders",
        report_title="Job order production report",
        headers=headers,
        rows=rows,
        filename="job_orders.xlsx",
        column_widths=[12, 24, 28, 12, 14, 14, 12, 14, 10, 18, 14, 18],
        table_name="JobOrders",
    )
