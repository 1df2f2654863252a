from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from production_line.reconciler import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    STATUS_OVERPRODUCED,
    classify_production,
    coerce_quantity,
    cutting_waste,
    printing_waste,
    received_total,
    reconcile,
    reconcile_job_order,
    recompute_from_rolls,
    roll_waste,
    roll_waste_pct,
    stage_totals,
    stage_waste_pct,
)


def roll(extruding=None, printing=None, cutting=None, status="For Printing"):
    return {
        "extruding_qty": extruding,
        "printing_qty": printing,
        "cutting_qty": cutting,
        "status": status,
    }


class ReconcileScenarioTests(SimpleTestCase):
    def test_extruded_roll_not_yet_received(self):
        metrics = reconcile(100, [roll(extruding=50)])

        self.assertEqual(metrics.extruding_total, 50)
        self.assertEqual(metrics.produced_total, 0)
        self.assertEqual(metrics.waste_total, 0)
        self.assertEqual(metrics.completion_pct, 0)
        self.assertEqual(metrics.waste_pct, 0)
        self.assertTrue(metrics.has_data)

    def test_received_roll_counts_as_produced(self):
        metrics = reconcile(100, [roll(extruding=60, printing=58, cutting=55, status="Received")])

        self.assertEqual(metrics.extruding_total, 60)
        self.assertEqual(metrics.produced_total, 55)
        self.assertEqual(metrics.waste_total, 5)
        self.assertAlmostEqual(metrics.completion_pct, 55)
        self.assertAlmostEqual(metrics.waste_pct, 5 / 60 * 100)

    def test_no_rolls_has_no_data(self):
        metrics = reconcile(100, [])

        self.assertFalse(metrics.has_data)
        self.assertEqual(metrics.extruding_total, 0)
        self.assertEqual(metrics.produced_total, 0)
        self.assertEqual(metrics.waste_total, 0)
        self.assertEqual(metrics.completion_pct, 0)
        self.assertEqual(metrics.waste_pct, 0)

    def test_zero_target_guards_completion(self):
        metrics = reconcile(0, [roll(extruding=10, cutting=10, status="Received")])

        self.assertEqual(metrics.completion_pct, 0)
        self.assertEqual(metrics.waste_total, 0)
        self.assertEqual(metrics.produced_total, 10)


class ReconcileCacheTests(SimpleTestCase):
    def test_nonzero_cache_is_trusted(self):
        rolls = [roll(extruding=60, cutting=55, status="Received")]
        metrics = reconcile(100, rolls, produced_quantity=Decimal("40"), waste_quantity=Decimal("3"))

        self.assertEqual(metrics.produced_total, 40)
        self.assertEqual(metrics.waste_total, 3)
        self.assertEqual(metrics.extruding_total, 60)

    def test_zero_cache_falls_back_to_rolls(self):
        rolls = [roll(extruding=60, cutting=55, status="Received")]
        metrics = reconcile(100, rolls, produced_quantity=0, waste_quantity=12)

        self.assertEqual(metrics.produced_total, 55)
        self.assertEqual(metrics.waste_total, 5)

    def test_cached_waste_hidden_without_production_data(self):
        for produced in (None, 0):
            with self.subTest(produced=produced):
                metrics = reconcile(100, [], produced_quantity=produced, waste_quantity=7)

                self.assertFalse(metrics.has_data)
                self.assertEqual(metrics.waste_total, 0)
                self.assertEqual(metrics.waste_pct, 0)

    def test_cached_waste_kept_with_cached_output(self):
        metrics = reconcile(100, [], produced_quantity=10, waste_quantity="4.5")

        self.assertTrue(metrics.has_data)
        self.assertEqual(metrics.waste_total, 4.5)

    def test_negative_cached_waste_is_clamped(self):
        metrics = reconcile(100, [], produced_quantity=10, waste_quantity=-3)

        self.assertEqual(metrics.waste_total, 0)
        self.assertTrue(metrics.has_data)

    def test_status_is_reported_as_stored(self):
        rolls = [roll(extruding=100, cutting=100, status="Received")]

        self.assertEqual(reconcile(100, rolls, production_status="In Progress").production_status, "In Progress")
        self.assertEqual(reconcile(100, rolls).production_status, STATUS_NOT_STARTED)

    def test_reconcile_job_order_reads_mapping(self):
        job_order = {
            "quantity": "200",
            "produced_quantity": 0,
            "waste_quantity": 0,
            "production_status": "In Progress",
            "rolls": [roll(extruding=120, cutting=100, status="Received")],
        }
        metrics = reconcile_job_order(job_order)

        self.assertEqual(metrics.produced_total, 100)
        self.assertEqual(metrics.waste_total, 20)
        self.assertAlmostEqual(metrics.completion_pct, 50)
        self.assertEqual(metrics.production_status, "In Progress")


class ReconcilePropertyTests(SimpleTestCase):
    def test_all_zero_quantities_have_no_data(self):
        rolls = [
            roll(extruding=0, cutting=0, status="Received"),
            roll(extruding=Decimal("0.00"), cutting=None, status="For Printing"),
        ]
        metrics = reconcile(100, rolls, produced_quantity=0, waste_quantity=3)

        self.assertFalse(metrics.has_data)
        self.assertEqual(metrics.extruding_total, 0)
        self.assertEqual(metrics.produced_total, 0)
        self.assertEqual(metrics.waste_total, 0)
        self.assertEqual(metrics.completion_pct, 0)
        self.assertEqual(metrics.waste_pct, 0)

    def test_same_inputs_give_same_result(self):
        rolls = [
            roll(extruding=60, printing=58, cutting=55, status="Received"),
            roll(extruding=30, status="For Cutting"),
        ]
        first = reconcile(100, rolls, production_status="In Progress")
        second = reconcile(100, rolls, production_status="In Progress")

        self.assertEqual(first, second)
        self.assertEqual(first.as_dict(), second.as_dict())

    def test_weights_rounded_like_stored_columns(self):
        rolls = [
            roll(extruding=Decimal("0.10"), cutting=Decimal("0.10"), status="Received"),
            roll(extruding=Decimal("0.20"), cutting=Decimal("0.10"), status="Received"),
        ]
        metrics = reconcile(100, rolls)

        self.assertEqual(metrics.extruding_total, 0.3)
        self.assertEqual(metrics.produced_total, 0.2)
        self.assertEqual(metrics.waste_total, 0.1)
        self.assertEqual(stage_totals(rolls)["extruding"], 0.3)

    def test_invalid_quantities_count_as_zero(self):
        rolls = [
            roll(extruding="abc"),
            roll(extruding=None),
            roll(extruding=float("nan")),
            roll(extruding=""),
            roll(extruding=5),
        ]
        metrics = reconcile("not a number", rolls)

        self.assertEqual(metrics.extruding_total, 5)
        self.assertEqual(metrics.completion_pct, 0)

    def test_only_received_rolls_are_produced(self):
        rolls = [
            roll(extruding=50, cutting=45, status="For Receiving"),
            roll(extruding=50, cutting=48, status="Received"),
        ]

        self.assertEqual(received_total(rolls), 48)
        self.assertEqual(reconcile(100, rolls).produced_total, 48)

    def test_waste_never_negative(self):
        # Cut weight above extruded weight (scale error) must not yield negative waste
        metrics = reconcile(100, [roll(extruding=40, cutting=45, status="Received")])

        self.assertEqual(metrics.waste_total, 0)
        self.assertEqual(metrics.waste_pct, 0)

    def test_completion_may_exceed_hundred(self):
        metrics = reconcile(50, [roll(extruding=80, cutting=75, status="Received")])

        self.assertAlmostEqual(metrics.completion_pct, 150)
        self.assertEqual(metrics.progress_pct, 100)

    def test_as_dict_contains_all_figures(self):
        data = reconcile(100, [roll(extruding=60, cutting=55, status="Received")]).as_dict()

        self.assertEqual(
            set(data),
            {
                "extruding_total", "produced_total", "waste_total", "completion_pct",
                "waste_pct", "production_status", "has_data", "progress_pct",
            },
        )

    def test_coerce_quantity(self):
        self.assertEqual(coerce_quantity(None), 0)
        self.assertEqual(coerce_quantity(True), 0)
        self.assertEqual(coerce_quantity(" 12.5 "), 12.5)
        self.assertEqual(coerce_quantity(Decimal("3.25")), 3.25)
        self.assertEqual(coerce_quantity(float("inf")), 0)
        self.assertEqual(coerce_quantity(Decimal("NaN")), 0)


class RecomputeTests(SimpleTestCase):
    def test_classify_production(self):
        self.assertEqual(classify_production(0, 100), STATUS_NOT_STARTED)
        self.assertEqual(classify_production(40, 100), STATUS_IN_PROGRESS)
        self.assertEqual(classify_production(100, 100), STATUS_COMPLETED)
        self.assertEqual(classify_production(101, 100), STATUS_OVERPRODUCED)

    def test_recompute_ignores_cache_and_classifies(self):
        rolls = [roll(extruding=110, cutting=105, status="Received")]
        metrics = recompute_from_rolls(100, rolls)

        self.assertEqual(metrics.produced_total, 105)
        self.assertEqual(metrics.waste_total, 5)
        self.assertEqual(metrics.production_status, STATUS_OVERPRODUCED)

    def test_recompute_agrees_with_read_path(self):
        rolls = [
            roll(extruding=60, printing=59, cutting=55, status="Received"),
            roll(extruding=30, status="For Printing"),
        ]
        server = recompute_from_rolls(100, rolls)
        cached = reconcile(
            100, rolls,
            produced_quantity=server.produced_total,
            waste_quantity=server.waste_total,
        )

        self.assertEqual(cached.produced_total, server.produced_total)
        self.assertEqual(cached.waste_total, server.waste_total)


class StageWasteTests(SimpleTestCase):
    def test_printing_and_cutting_waste(self):
        r = roll(extruding=100, printing=97, cutting=92, status="Received")

        self.assertEqual(printing_waste(r), 3)
        self.assertEqual(cutting_waste(r), 5)
        self.assertEqual(roll_waste(r), 8)
        self.assertAlmostEqual(roll_waste_pct(r), 8)

    def test_unprinted_roll_cut_from_extrusion(self):
        r = roll(extruding=50, cutting=47, status="For Receiving")

        self.assertIsNone(printing_waste(r))
        self.assertEqual(cutting_waste(r), 3)

    def test_roll_waste_before_later_stages(self):
        self.assertIsNone(roll_waste(roll()))
        self.assertEqual(roll_waste(roll(extruding=20)), 0)
        self.assertEqual(roll_waste(roll(extruding=20, printing=18)), 2)
        self.assertIsNone(roll_waste_pct(roll(extruding=0)))

    def test_stage_waste_pct_needs_positive_input(self):
        self.assertIsNone(stage_waste_pct(0, 0))
        self.assertAlmostEqual(stage_waste_pct(200, 190), 5)

    def test_stage_totals(self):
        rolls = [
            roll(extruding=10, printing=9, cutting=8),
            roll(extruding=5, cutting="4.5"),
        ]

        self.assertEqual(stage_totals(rolls), {"extruding": 15, "printing": 9, "cutting": 12.5})
