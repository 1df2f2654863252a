import logging

from django.core.management.base import BaseCommand, CommandError

from job_orders.models import JobOrder
from job_orders.services import refresh_production_quantities, sync_workflow_status

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Recompute cached produced quantity, waste and production status of job orders from their rolls."

    def add_arguments(self, parser):
        parser.add_argument(
            "--job-order",
            dest="job_orders",
            type=int,
            nargs="+",
            help="Only refresh these job order ids (default: all).",
        )

    def handle(self, *args, **options):
        ids = options.get("job_orders")
        qs = JobOrder.objects.order_by("id")
        if ids:
            qs = qs.filter(pk__in=ids)
            missing = sorted(set(ids) - set(qs.values_list("pk", flat=True)))
            if missing:
                raise CommandError(f"Unknown job order id(s): {', '.join(map(str, missing))}")

        changed = 0
        total = 0
        for job_order in qs:
            before = (job_order.produced_quantity, job_order.waste_quantity, job_order.production_status)
            refresh_production_quantities(job_order)
            sync_workflow_status(job_order)
            after = (job_order.produced_quantity, job_order.waste_quantity, job_order.production_status)
            total += 1
            if before != after:
                changed += 1
                self.stdout.write(
                    f"JO-{job_order.pk}: produced={job_order.produced_quantity} "
                    f"waste={job_order.waste_quantity} status={job_order.production_status}"
                )
        logger.info("Refreshed %d job orders (%d changed)", total, changed)
        self.stdout.write(self.style.SUCCESS(f"Refreshed {total} job orders; {changed} changed."))
