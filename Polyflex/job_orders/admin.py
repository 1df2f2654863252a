"""
Admin configuration for the job_orders app.

Job orders are created and edited through the Django admin.  The cached
production columns are read-only here; they are rebuilt from the rolls.
"""

from django.contrib import admin

from production_line.models import Roll
from .models import JobOrder
from .services import refresh_production_quantities, sync_workflow_status


class RollInline(admin.TabularInline):
    model = Roll
    extra = 0
    fields = ("roll_number", "roll_identification", "extruding_qty", "printing_qty", "cutting_qty", "status")
    readonly_fields = ("roll_identification",)


@admin.register(JobOrder)
class JobOrderAdmin(admin.ModelAdmin):
    list_display = (
        "id", "customer_name", "item_description", "quantity",
        "produced_quantity", "waste_quantity", "production_status", "status", "created_at",
    )
    search_fields = ("customer_name", "item_description", "size_details")
    list_filter = ("status", "production_status", "is_printed")
    readonly_fields = ("produced_quantity", "waste_quantity", "production_status")
    inlines = [RollInline]
    actions = ["refresh_metrics"]

    @admin.action(description="Recompute produced quantity and waste from rolls")
    def refresh_metrics(self, request, queryset):
        for job_order in queryset:
            refresh_production_quantities(job_order)
            sync_workflow_status(job_order)
        self.message_user(request, f"{queryset.count()} job order(s) refreshed.")
