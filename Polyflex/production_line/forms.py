# production_line/forms.py
from decimal import Decimal

from django import forms
from django.utils.translation import gettext_lazy as _

from job_orders.models import JobOrder
from .models import MAX_ROLL_WEIGHT, Roll

QTY_FIELD_KWARGS = {
    "required": False,
    "min_value": Decimal("0"),
    "max_value": MAX_ROLL_WEIGHT - Decimal("0.01"),
    "max_digits": 10,
    "decimal_places": 2,
}


class RollCreateForm(forms.ModelForm):
    """Register a new roll against an open job order."""

    job_order = forms.ModelChoiceField(
        queryset=JobOrder.objects.exclude(status__in=("completed", "cancelled")),
        label=_("Job order"),
        error_messages={"invalid_choice": _("The job order does not exist or is closed.")},
    )
    roll_number = forms.IntegerField(required=False, min_value=1, label=_("Roll number"))
    extruding_qty = forms.DecimalField(label=_("Extruding quantity"), **QTY_FIELD_KWARGS)
    notes = forms.CharField(required=False, max_length=200, label=_("Notes"))

    class Meta:
        model = Roll
        fields = ["job_order", "roll_number", "extruding_qty", "notes"]

    def clean(self):
        cleaned = super().clean()
        job_order = cleaned.get("job_order")
        roll_number = cleaned.get("roll_number")
        if job_order and roll_number:
            if Roll.objects.filter(job_order=job_order, roll_number=roll_number).exists():
                self.add_error("roll_number", _("This roll number is already used for the job order."))
        return cleaned


class RollStageForm(forms.Form):
    """Quantity entered when a roll moves to its next stage."""

    qty = forms.DecimalField(label=_("Quantity"), **QTY_FIELD_KWARGS)

    def __init__(self, *args, **kwargs):
        self.stage = kwargs.pop("stage", None)
        super().__init__(*args, **kwargs)
        # Receiving only confirms the cut weight
        if self.stage and self.stage != "receiving":
            self.fields["qty"].required = True
            self.fields["qty"].error_messages.update({"required": _("Enter the weight for this stage.")})
