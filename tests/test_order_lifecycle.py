"""
Tests for the order production/QC roll-up functions.
"""
from texawave.services.order_lifecycle import (
    build_job_for_item,
    derive_order_status,
    production_summary,
    progress_for_status,
    qc_rollup
)


def job(job_id, status):
    return {"id": job_id, "status": status, "qty": 10}


def inspection(job_id, qc_status, ok=0, not_ok=0):
    return {"job_id": job_id, "qc_status": qc_status, "ok_qty": ok, "not_ok_qty": not_ok}


class TestProductionSummary:

    def test_no_jobs_is_pending(self):
        summary = production_summary([])
        assert summary["total"] == 0
        assert summary["overall"] == "pending"

    def test_mixed_jobs_in_progress(self):
        summary = production_summary([job("a", "completed"), job("b", "notstarted"), job("c", None)])
        assert summary["completed"] == 1
        assert summary["not_started"] == 2
        assert summary["overall"] == "inprogress"

    def test_all_completed(self):
        assert production_summary([job("a", "completed"), job("b", "completed")])["overall"] == "completed"

    def test_only_paused_counts_as_started(self):
        assert production_summary([job("a", "paused")])["overall"] == "inprogress"


class TestDerivedStatus:

    def test_pending_without_jobs(self):
        assert derive_order_status({"status": "Pending"}, [], []) == "Pending"

    def test_confirmed_without_jobs(self):
        assert derive_order_status({"status": "Confirmed"}, [], []) == "Confirmed"

    def test_in_production(self):
        assert derive_order_status({"status": "Confirmed"}, [job("a", "running")], []) == "In Production"

    def test_qc_pending_until_every_job_inspected(self):
        jobs = [job("a", "completed"), job("b", "completed")]
        inspections = [inspection("a", "completed")]
        assert derive_order_status({"status": "Confirmed"}, jobs, inspections) == "QC Pending"

    def test_qc_completed(self):
        jobs = [job("a", "completed"), job("b", "completed")]
        inspections = [inspection("a", "completed"), inspection("b", "completed")]
        assert derive_order_status({"status": "In Production"}, jobs, inspections) == "QC Completed"

    def test_post_qc_status_is_kept(self):
        jobs = [job("a", "running")]
        assert derive_order_status({"status": "Delivered"}, jobs, []) == "Delivered"


class TestQcRollup:

    def test_sums_quantities(self):
        jobs = [job("a", "completed"), job("b", "completed")]
        rollup = qc_rollup(jobs, [inspection("a", "completed", 8, 2), inspection("b", "in-progress", 5, 0)])
        assert rollup["qc_status"] == "inprogress"
        assert rollup["ok_qty"] == 13
        assert rollup["not_ok_qty"] == 2

    def test_completed_when_every_job_done(self):
        rollup = qc_rollup([job("a", "completed")], [inspection("a", "completed", 10, 0)])
        assert rollup["qc_status"] == "completed"

    def test_pending_without_inspections(self):
        assert qc_rollup([job("a", "running")], [])["qc_status"] == "pending"


class TestJobBuilding:

    def test_reads_alternative_item_fields(self):
        order = {"id": "o1", "so_number": "SO-1001", "customer_name": "ACME", "delivery_date": "2025-02-01"}
        built = build_job_for_item(order, {"sku": "SKU-9", "product_description": "Cotton tape", "quantity": 25}, 0)
        assert built["product_id"] == "SKU-9"
        assert built["product_name"] == "Cotton tape"
        assert built["qty"] == 25.0
        assert built["status"] == "notstarted"

    def test_fallback_identity(self):
        built = build_job_for_item({"id": "o1"}, {}, 2)
        assert built["product_id"] == "unknown-2"
        assert built["product_name"] == "unknown-2 - Item 3"
        assert built["qty"] == 1.0

    def test_progress(self):
        assert progress_for_status("QC Pending") == 75
        assert progress_for_status("something else") == 10
