from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from job_orders.models import JobOrder, ProductionStatus
from production_line.models import Roll, RollStatus, Stage, normalize_quantity


class RollTestMixin:
    def setUp(self):
        User = get_user_model()
        self.operator = User.objects.create_user(username="line", password="pass123", role="manager")
        self.printed_order = JobOrder.objects.create(
            customer_name="Acme Foods", item_description="T-shirt bag", quantity=Decimal("100"), is_printed=True,
        )
        self.plain_order = JobOrder.objects.create(
            customer_name="Acme Foods", item_description="Garbage bag", quantity=Decimal("100"), is_printed=False,
        )

    def make_roll(self, job_order=None, **kwargs):
        kwargs.setdefault("extruding_qty", Decimal("50"))
        return Roll.objects.create(job_order=job_order or self.printed_order, created_by=self.operator, **kwargs)


class RollCreationTests(RollTestMixin, TestCase):
    def test_assigns_identification_and_number(self):
        first = self.make_roll()
        second = self.make_roll()
        other = self.make_roll(job_order=self.plain_order)

        self.assertTrue(first.roll_identification.startswith("ROLL-"))
        self.assertNotEqual(first.roll_identification, second.roll_identification)
        self.assertEqual((first.roll_number, second.roll_number), (1, 2))
        self.assertEqual(other.roll_number, 1)
        self.assertEqual(first.status, RollStatus.FOR_PRINTING)

    def test_extrusion_recorded_on_create(self):
        r = self.make_roll()

        self.assertIsNotNone(r.extruded_at)
        self.assertEqual(r.extruded_by, self.operator)

    def test_roll_cannot_change_job_order(self):
        r = self.make_roll()
        r.job_order = self.plain_order

        with self.assertRaises(ValidationError):
            r.save()


class RollTransitionTests(RollTestMixin, TestCase):
    def test_printed_order_full_path(self):
        r = self.make_roll()
        self.assertEqual(r.next_stage(), Stage.PRINTING)

        self.assertEqual(r.advance(self.operator, "48"), Stage.PRINTING)
        self.assertEqual(r.status, RollStatus.FOR_CUTTING)
        self.assertEqual(r.printing_qty, Decimal("48.00"))

        self.assertEqual(r.advance(self.operator, Decimal("45.5")), Stage.CUTTING)
        self.assertEqual(r.status, RollStatus.FOR_RECEIVING)

        self.assertEqual(r.advance(self.operator), Stage.RECEIVING)
        r.refresh_from_db()
        self.assertEqual(r.status, RollStatus.RECEIVED)
        self.assertEqual(r.cutting_qty, Decimal("45.50"))
        self.assertIsNotNone(r.received_at)
        self.assertIsNone(r.next_stage())

    def test_unprinted_order_skips_printing(self):
        r = self.make_roll(job_order=self.plain_order)

        self.assertEqual(r.next_stage(), Stage.CUTTING)
        r.advance(self.operator, "49")
        self.assertEqual(r.status, RollStatus.FOR_RECEIVING)
        self.assertIsNone(r.printing_qty)

    def test_roll_without_extrusion_waits_for_extruding(self):
        r = self.make_roll(extruding_qty=None)

        self.assertEqual(r.next_stage(), Stage.EXTRUDING)
        r.advance(self.operator, "30")
        self.assertEqual(r.extruding_qty, Decimal("30.00"))
        self.assertEqual(r.status, RollStatus.FOR_PRINTING)

    def test_cannot_print_from_wrong_status(self):
        r = self.make_roll()
        r.advance(self.operator, "48")

        with self.assertRaises(ValidationError):
            r.record_printing(self.operator, "40")

    def test_cannot_receive_before_cutting(self):
        r = self.make_roll()

        with self.assertRaises(ValidationError):
            r.mark_received(self.operator)

    def test_received_roll_cannot_advance(self):
        r = self.make_roll(job_order=self.plain_order)
        r.advance(self.operator, "49")
        r.advance(self.operator)

        with self.assertRaises(ValidationError):
            r.advance(self.operator, "10")

    def test_rejects_bad_quantities(self):
        r = self.make_roll()
        for bad in (None, "", "abc", "-1", "NaN", "100000000"):
            with self.subTest(qty=bad):
                with self.assertRaises(ValidationError):
                    r.record_printing(self.operator, bad)
        r.refresh_from_db()
        self.assertEqual(r.status, RollStatus.FOR_PRINTING)

    def test_normalize_quantity_rounds(self):
        self.assertEqual(normalize_quantity("12.345", field_label="Qty"), Decimal("12.34"))
        self.assertEqual(normalize_quantity(7, field_label="Qty"), Decimal("7.00"))


class RollSignalTests(RollTestMixin, TestCase):
    def test_received_roll_refreshes_job_order_cache(self):
        with self.captureOnCommitCallbacks(execute=True):
            r = self.make_roll(job_order=self.plain_order, extruding_qty=Decimal("60"))
        with self.captureOnCommitCallbacks(execute=True):
            r.advance(self.operator, "55")
        with self.captureOnCommitCallbacks(execute=True):
            r.advance(self.operator)

        self.plain_order.refresh_from_db()
        self.assertEqual(self.plain_order.produced_quantity, Decimal("55.00"))
        self.assertEqual(self.plain_order.waste_quantity, Decimal("5.00"))
        self.assertEqual(self.plain_order.production_status, ProductionStatus.IN_PROGRESS)
        self.assertEqual(self.plain_order.status, "in_progress")

    def test_extrusion_alone_does_not_count_as_waste(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.make_roll(extruding_qty=Decimal("40"))

        self.printed_order.refresh_from_db()
        self.assertEqual(self.printed_order.produced_quantity, 0)
        self.assertEqual(self.printed_order.waste_quantity, 0)
        self.assertEqual(self.printed_order.production_status, ProductionStatus.NOT_STARTED)
        self.assertEqual(self.printed_order.status, "in_progress")

    def test_target_extruded_completes_workflow(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.make_roll(extruding_qty=Decimal("60"))
            self.make_roll(extruding_qty=Decimal("45"))

        self.printed_order.refresh_from_db()
        self.assertEqual(self.printed_order.status, "completed")

    def test_deleting_roll_recomputes(self):
        with self.captureOnCommitCallbacks(execute=True):
            r = self.make_roll(job_order=self.plain_order, extruding_qty=Decimal("60"))
            r.advance(self.operator, "55")
            r.advance(self.operator)
        self.plain_order.refresh_from_db()
        self.assertEqual(self.plain_order.produced_quantity, Decimal("55.00"))

        with self.captureOnCommitCallbacks(execute=True):
            r.delete()

        self.plain_order.refresh_from_db()
        self.assertEqual(self.plain_order.produced_quantity, 0)
        self.assertEqual(self.plain_order.production_status, ProductionStatus.NOT_STARTED)

    def test_cancelled_order_stays_cancelled(self):
        self.printed_order.status = "cancelled"
        self.printed_order.save()

        with self.captureOnCommitCallbacks(execute=True):
            self.make_roll(extruding_qty=Decimal("60"))

        self.printed_order.refresh_from_db()
        self.assertEqual(self.printed_order.status, "cancelled")
