"""
Sales order production/QC lifecycle.

Pure functions that turn an order, its production jobs and their
inspections into the order-level view: production summary, derived
status, QC roll-up and progress percentage.
"""
from typing import Dict, Any, List, Optional

from texawave.services.business_rules import (
    OrderStatus,
    ProductionStatus,
    QCStatus,
    JobStatus,
    InspectionStatus,
    POST_QC_STATUSES,
)

STATUS_PROGRESS = {
    OrderStatus.PENDING.value: 10,
    OrderStatus.CONFIRMED.value: 20,
    OrderStatus.IN_PRODUCTION.value: 55,
    OrderStatus.QC_PENDING.value: 75,
    OrderStatus.QC_COMPLETED.value: 100,
    OrderStatus.READY_FOR_DISPATCH.value: 90,
    OrderStatus.DELIVERED.value: 95,
    OrderStatus.INVOICE_GENERATED.value: 98,
    OrderStatus.CLOSED.value: 100,
}


def production_summary(jobs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Count jobs per state and compute the overall production status.

    Jobs without a status count as not started.
    """
    counts = {"not_started": 0, "running": 0, "paused": 0, "completed": 0}
    for job in jobs:
        st = job.get("status") or JobStatus.NOT_STARTED.value
        if st == JobStatus.COMPLETED.value:
            counts["completed"] += 1
        elif st == JobStatus.RUNNING.value:
            counts["running"] += 1
        elif st == JobStatus.PAUSED.value:
            counts["paused"] += 1
        else:
            counts["not_started"] += 1

    total = len(jobs)
    if total == 0:
        overall = ProductionStatus.PENDING.value
    elif counts["completed"] == total:
        overall = ProductionStatus.COMPLETED.value
    elif counts["running"] or counts["paused"] or counts["completed"]:
        overall = ProductionStatus.IN_PROGRESS.value
    else:
        overall = ProductionStatus.PENDING.value

    return {**counts, "total": total, "overall": overall}


def all_inspections_completed(jobs: List[Dict[str, Any]], inspections: List[Dict[str, Any]]) -> bool:
    """True when there is one inspection per job and every one is completed."""
    if not jobs:
        return False
    return len(inspections) == len(jobs) and all(
        i.get("qc_status") == InspectionStatus.COMPLETED.value for i in inspections
    )


def derive_order_status(
    order: Dict[str, Any],
    jobs: List[Dict[str, Any]],
    inspections: List[Dict[str, Any]]
) -> str:
    """
    Derive the lifecycle status from jobs and inspections.

    Post-QC statuses are set by hand and are returned unchanged.
    """
    stored = order.get("status", OrderStatus.PENDING.value)
    if stored in POST_QC_STATUSES:
        return stored

    summary = production_summary(jobs)
    if summary["total"] == 0:
        if stored == OrderStatus.PENDING.value:
            return OrderStatus.PENDING.value
        return OrderStatus.CONFIRMED.value

    if summary["overall"] == ProductionStatus.COMPLETED.value:
        if all_inspections_completed(jobs, inspections):
            return OrderStatus.QC_COMPLETED.value
        return OrderStatus.QC_PENDING.value

    return OrderStatus.IN_PRODUCTION.value


def qc_rollup(jobs: List[Dict[str, Any]], inspections: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate inspections into the order QC status and quantities.

    Returns:
        Dict with qc_status, ok_qty, not_ok_qty
    """
    by_job = {i.get("job_id"): i for i in inspections}
    every_job_done = bool(jobs) and all(
        by_job.get(job["id"], {}).get("qc_status") == InspectionStatus.COMPLETED.value
        for job in jobs
    )

    if every_job_done:
        qc_status = QCStatus.COMPLETED.value
    elif inspections:
        qc_status = QCStatus.IN_PROGRESS.value
    else:
        qc_status = QCStatus.PENDING.value

    return {
        "qc_status": qc_status,
        "ok_qty": sum(float(i.get("ok_qty", 0) or 0) for i in inspections),
        "not_ok_qty": sum(float(i.get("not_ok_qty", 0) or 0) for i in inspections),
    }


def progress_for_status(status: Optional[str]) -> int:
    """Percentage shown on the order progress bar."""
    return STATUS_PROGRESS.get(status, 10)


def build_job_for_item(order: Dict[str, Any], item: Dict[str, Any], index: int) -> Dict[str, Any]:
    """
    Build the production job document for one order line.

    Lines come from quotations or manual entry, so product identity and
    quantity are read from whichever field the line carries.
    """
    product_id = (
        item.get("product_id")
        or item.get("sku")
        or item.get("id")
        or f"unknown-{index}"
    )
    product_name = (
        item.get("product_name")
        or item.get("product_description")
        or item.get("name")
        or f"{product_id} - Item {index + 1}"
    )
    qty = item.get("qty") or item.get("quantity") or 1

    return {
        "order_id": order["id"],
        "so_number": order.get("so_number"),
        "customer_name": order.get("customer_name"),
        "product_id": product_id,
        "product_name": product_name,
        "qty": float(qty),
        "delivery_date": order.get("delivery_date"),
        "priority": "normal",
        "status": JobStatus.NOT_STARTED.value,
    }
