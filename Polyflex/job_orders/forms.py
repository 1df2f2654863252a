# job_orders/forms.py
from decimal import Decimal

from django import forms
from django.utils.translation import gettext_lazy as _

from .models import JobOrder


class JobOrderForm(forms.ModelForm):
    quantity = forms.DecimalField(
        min_value=Decimal("0.01"), max_digits=12, decimal_places=2,
        label=_("Target quantity (kg)"),
        error_messages={"min_value": _("The target quantity must be greater than zero.")},
    )

    class Meta:
        model = JobOrder
        fields = [
            "customer_name", "item_description", "size_details", "thickness",
            "is_printed", "notes", "quantity",
        ]

    def clean_customer_name(self):
        return (self.cleaned_data.get("customer_name") or "").strip()

    def clean_item_description(self):
        return (self.cleaned_data.get("item_description") or "").strip()
