from django.contrib import admin
from .models import Roll


@admin.register(Roll)
class RollAdmin(admin.ModelAdmin):
    list_display = (
        "roll_identification", "job_order", "roll_number",
        "extruding_qty", "printing_qty", "cutting_qty", "status", "created_at",
    )
    search_fields = ("roll_identification", "job_order__customer_name")
    list_filter = ("status", "job_order__is_printed")
    readonly_fields = (
        "roll_identification",
        "created_at", "extruded_at", "printed_at", "cut_at", "received_at",
    )
    raw_id_fields = ("job_order",)
