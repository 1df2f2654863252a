import logging

import qrcode
from qrcode.image.svg import SvgPathImage

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.http import Http404, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from job_orders.models import JobOrder
from .forms import RollCreateForm, RollStageForm
from .models import Roll, RollStatus, Stage
from .reconciler import roll_waste, roll_waste_pct
from .utils import can_perform_stage, can_view_production, get_user_role

logger = logging.getLogger(__name__)

# ------------------------------
# Helpers
# ------------------------------

def _user_label(user):
    if user is None:
        return None
    return getattr(user, 'full_name', '') or user.get_username()


def _dt(value):
    return value.isoformat() if value else None


def _qty(value):
    return float(value) if value is not None else None


def roll_payload(roll: Roll) -> dict:
    """JSON-ready representation of a roll, including its own waste."""
    return {
        "id": roll.id,
        "roll_identification": roll.roll_identification,
        "job_order_id": roll.job_order_id,
        "roll_number": roll.roll_number,
        "extruding_qty": _qty(roll.extruding_qty),
        "printing_qty": _qty(roll.printing_qty),
        "cutting_qty": _qty(roll.cutting_qty),
        "status": roll.status,
        "notes": roll.notes or "",
        "waste": roll_waste(roll),
        "waste_pct": roll_waste_pct(roll),
        "created_at": _dt(roll.created_at),
        "created_by": _user_label(roll.created_by),
        "extruded_at": _dt(roll.extruded_at),
        "extruded_by": _user_label(roll.extruded_by),
        "printed_at": _dt(roll.printed_at),
        "printed_by": _user_label(roll.printed_by),
        "cut_at": _dt(roll.cut_at),
        "cut_by": _user_label(roll.cut_by),
        "received_at": _dt(roll.received_at),
        "received_by": _user_label(roll.received_by),
    }


def _form_errors(form) -> dict:
    return {field: [str(e) for e in errors] for field, errors in form.errors.items()}


def _forbidden():
    return JsonResponse({"ok": False, "error": "permission_denied"}, status=403)


def _rolls_queryset():
    return Roll.objects.select_related(
        'created_by', 'extruded_by', 'printed_by', 'cut_by', 'received_by',
    )


# ------------------------------
# Roll ledger APIs
# ------------------------------

@require_POST
@login_required
def api_roll_create(request):
    """Register a new roll; an extruded weight may be entered right away."""
    if not can_perform_stage(request.user, Stage.EXTRUDING):
        return _forbidden()
    form = RollCreateForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": _form_errors(form)}, status=400)
    roll = form.save(commit=False)
    roll.created_by = request.user
    try:
        with transaction.atomic():
            roll.save()
    except IntegrityError:
        return JsonResponse(
            {"ok": False, "errors": {"roll_number": ["This roll number is already used for the job order."]}},
            status=400,
        )
    logger.info("Roll %s created for JO-%s by %s", roll.roll_identification, roll.job_order_id, request.user)
    return JsonResponse({"ok": True, "roll": roll_payload(roll)}, status=201)


@require_POST
@login_required
def api_roll_advance(request, pk: int):
    """Move a roll to its next stage (extrude, print, cut or receive)."""
    roll = get_object_or_404(Roll.objects.select_related('job_order'), pk=pk)
    stage = roll.next_stage()
    if stage is None:
        return JsonResponse({"ok": False, "error": "This roll has already been received."}, status=400)
    if not can_perform_stage(request.user, stage):
        return _forbidden()

    form = RollStageForm(request.POST, stage=stage)
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": _form_errors(form)}, status=400)
    try:
        performed = roll.advance(request.user, form.cleaned_data.get('qty'))
    except ValidationError as exc:
        return JsonResponse({"ok": False, "error": " ".join(exc.messages)}, status=400)
    return JsonResponse({"ok": True, "stage": str(performed), "roll": roll_payload(roll)})


@require_POST
@login_required
def api_roll_delete(request, pk: int):
    if get_user_role(request.user) != "manager":
        return _forbidden()
    roll = get_object_or_404(Roll, pk=pk)
    identification = roll.roll_identification
    roll.delete()
    logger.info("Roll %s deleted by %s", identification, request.user)
    return JsonResponse({"ok": True, "deleted": identification})


@require_GET
@login_required
def api_rolls_by_job_order(request, job_order_id: int):
    if not can_view_production(request.user):
        return _forbidden()
    if not JobOrder.objects.filter(pk=job_order_id).exists():
        return JsonResponse({"ok": False, "error": "not_found"}, status=404)
    rolls = _rolls_queryset().filter(job_order_id=job_order_id).order_by('roll_number')
    return JsonResponse({"ok": True, "results": [roll_payload(r) for r in rolls]})


@require_GET
@login_required
def api_rolls_by_status(request, status: str):
    """Stage work queue: rolls currently sitting in ``status``."""
    if not can_view_production(request.user):
        return _forbidden()
    valid = {value for value, _ in RollStatus.choices}
    if status not in valid:
        return JsonResponse({"ok": False, "error": "invalid_status", "choices": sorted(valid)}, status=400)
    rolls = _rolls_queryset().filter(status=status).order_by('created_at', 'id')
    return JsonResponse({"ok": True, "results": [roll_payload(r) for r in rolls]})


@require_GET
@login_required
def api_roll_validate(request, code: str):
    """
    Resolve a scanned QR code (roll id or roll identification) to the roll
    and its job order.
    """
    code = (code or '').strip()
    if not code:
        return JsonResponse({"ok": False, "error": "missing code"}, status=400)

    qs = _rolls_queryset().select_related('job_order')
    roll = qs.filter(roll_identification=code).first()
    if roll is None and code.isdigit():
        roll = qs.filter(pk=int(code)).first()
    if roll is None:
        return JsonResponse({"ok": False, "error": "not_found"}, status=404)

    job_order = roll.job_order
    payload = {
        "ok": True,
        "roll": roll_payload(roll),
        "next_stage": roll.next_stage(),
        "job_order": {
            "id": job_order.id,
            "customer_name": job_order.customer_name,
            "item_description": job_order.item_description,
            "quantity": float(job_order.quantity),
            "status": job_order.status,
            "metrics": job_order.metrics().as_dict(),
        },
    }
    return JsonResponse(payload)


@require_GET
@login_required
def roll_qr_svg(request, pk: int):
    """Return the QR label of a roll as SVG (encodes the roll identification)."""
    roll = Roll.objects.filter(pk=pk).only('roll_identification').first()
    if roll is None:
        raise Http404("Roll not found.")
    qr = qrcode.QRCode(
        version=None,  # smallest version that fits
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=0,
    )
    qr.add_data(roll.roll_identification)
    qr.make(fit=True)
    img = qr.make_image(image_factory=SvgPathImage)
    return HttpResponse(img.to_string(), content_type="image/svg+xml; charset=utf-8")
