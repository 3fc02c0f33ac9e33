"""
Sales order service.

Orders are created from accepted quotations or entered by hand. Confirming
an order fans out one production job per line; saving a job together with
its inspection rolls production and QC back up into the order status.
"""
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from texawave.repositories.sales_order_repository import (
    SalesOrderRepository,
    ProductionJobRepository,
    InspectionRepository
)
from texawave.repositories.quotation_repository import QuotationRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.exceptions import NotFoundError, BusinessLogicError, validate_numeric_range
from texawave.models.sales_order import (
    SalesOrderFromQuotation,
    SalesOrderCreate,
    SalesOrderUpdate,
    JobQCUpdate
)
from texawave.services.business_rules import (
    BusinessRules,
    OrderStatus,
    ProductionStatus,
    QCStatus,
    OrderInvoiceStatus,
    DeliveryStatus,
    JobStatus,
    QuotationStatus
)
from texawave.services.order_lifecycle import (
    build_job_for_item,
    derive_order_status,
    production_summary,
    progress_for_status,
    qc_rollup
)
from texawave.utils.gst_calculator import calculate_order_totals
from texawave.utils.numbering import generate_so_number
from texawave.utils.logger import LoggerAdapter
from texawave.utils.dates import today_str, to_date_str

logger = logging.getLogger(__name__)

# Order fields copied from an accepted quotation
QUOTATION_TOTAL_FIELDS = ("subtotal", "cgst_amount", "sgst_amount", "transport_charge", "grand_total")

DELIVERY_FOR_STATUS = {
    OrderStatus.READY_FOR_DISPATCH.value: DeliveryStatus.IN_TRANSIT.value,
    OrderStatus.DELIVERED.value: DeliveryStatus.DELIVERED.value,
}


def _initial_order_state() -> Dict[str, Any]:
    return {
        "status": OrderStatus.PENDING.value,
        "production_status": ProductionStatus.PENDING.value,
        "qc_status": QCStatus.PENDING.value,
        "invoice_status": OrderInvoiceStatus.NOT_GENERATED.value,
        "delivery_status": DeliveryStatus.NOT_DISPATCHED.value,
        "ok_qty": 0.0,
        "not_ok_qty": 0.0,
    }


class SalesOrderService:
    """Service for sales orders and their production/QC lifecycle."""

    def __init__(
        self,
        order_repo: SalesOrderRepository,
        job_repo: ProductionJobRepository,
        inspection_repo: InspectionRepository,
        quotation_repo: QuotationRepository,
        customer_repo: CustomerRepository
    ):
        self.order_repo = order_repo
        self.job_repo = job_repo
        self.inspection_repo = inspection_repo
        self.quotation_repo = quotation_repo
        self.customer_repo = customer_repo

    def _log(self, order_id: str) -> LoggerAdapter:
        return LoggerAdapter(logger, {"order_id": order_id})

    async def _next_so_number(self) -> str:
        """Count-based, stepping past numbers left taken by a deleted order."""
        count = await self.order_repo.count()
        number = generate_so_number(count)
        while await self.order_repo.exists({"so_number": number}):
            count += 1
            number = generate_so_number(count)
        return number

    async def get_order_doc(self, order_id: str) -> Dict[str, Any]:
        order = await self.order_repo.find_by_id(order_id)
        if not order:
            raise NotFoundError("Sales order", order_id)
        return order

    # ---- Creation ----

    async def create_from_quotation(self, data: SalesOrderFromQuotation, user_id: str) -> Dict[str, Any]:
        """
        Create a sales order from an accepted quotation.

        Delivery date falls back to the quotation delivery term, then today.

        Raises:
            NotFoundError: If quotation not found
            BusinessLogicError: If the quotation is not Accepted or already converted
        """
        quotation = await self.quotation_repo.find_by_id(data.quotation_id)
        if not quotation:
            raise NotFoundError("Quotation", data.quotation_id)
        if quotation.get("status") != QuotationStatus.ACCEPTED.value:
            raise BusinessLogicError(
                "Only accepted quotations can be converted to sales orders",
                details={"quotation_id": data.quotation_id, "status": quotation.get("status")}
            )
        if await self.order_repo.find_by_quotation(data.quotation_id):
            raise BusinessLogicError(
                "Quotation already converted to a sales order",
                details={"quotation_id": data.quotation_id}
            )

        order_doc = {
            "so_number": await self._next_so_number(),
            "quotation_id": quotation["id"],
            "quotation_number": quotation.get("quotation_number"),
            "customer_id": quotation.get("customer_id"),
            "customer_name": quotation.get("customer_name"),
            "items": quotation.get("items", []),
            "currency": quotation.get("currency", "INR"),
            **{field: quotation.get(field, 0) for field in QUOTATION_TOTAL_FIELDS},
            "delivery_date": to_date_str(data.delivery_date) or quotation.get("delivery_term") or today_str(),
            "instructions": data.instructions,
            "po_number": data.po_number,
            **_initial_order_state(),
            "created_by": user_id
        }

        order_id = await self.order_repo.create(order_doc)
        await self.quotation_repo.update(quotation["id"], {"sales_order_id": order_id})
        self._log(order_id).info(f"Sales order {order_doc['so_number']} created from {quotation.get('quotation_number')}")
        return order_doc | {"id": order_id}

    async def create_manual(self, data: SalesOrderCreate, user_id: str) -> Dict[str, Any]:
        """
        Create a sales order from manually entered lines.

        Raises:
            NotFoundError: If customer not found
        """
        customer = await self.customer_repo.find_by_id(data.customer_id)
        if not customer:
            raise NotFoundError("Customer", data.customer_id)

        totals = calculate_order_totals(
            [item.model_dump() for item in data.items],
            data.currency,
            data.cgst_percent,
            data.sgst_percent,
            data.transport_percent
        )

        order_doc = {
            "so_number": await self._next_so_number(),
            "quotation_id": None,
            "customer_id": customer["id"],
            "customer_name": customer.get("name"),
            "currency": data.currency,
            "cgst_percent": data.cgst_percent,
            "sgst_percent": data.sgst_percent,
            "transport_percent": data.transport_percent,
            **totals,
            "delivery_date": to_date_str(data.delivery_date) or today_str(),
            "instructions": data.instructions,
            "po_number": data.po_number,
            **_initial_order_state(),
            "created_by": user_id
        }

        order_id = await self.order_repo.create(order_doc)
        self._log(order_id).info(f"Sales order {order_doc['so_number']} created, total={totals['grand_total']}")
        return order_doc | {"id": order_id}

    # ---- Edit / delete ----

    async def update_order(self, order_id: str, data: SalesOrderUpdate) -> Dict[str, Any]:
        await self.get_order_doc(order_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        if changes:
            await self.order_repo.update(order_id, changes)
        return await self.get_order(order_id)

    async def delete_order(self, order_id: str) -> Dict[str, int]:
        """Delete an order together with its jobs and inspections."""
        await self.get_order_doc(order_id)
        jobs = await self.job_repo.delete_by_order(order_id)
        inspections = await self.inspection_repo.delete_by_order(order_id)
        await self.order_repo.delete(order_id)
        self._log(order_id).info(f"Sales order deleted with {jobs} jobs and {inspections} inspections")
        return {"jobs_deleted": jobs, "inspections_deleted": inspections}

    # ---- Lifecycle ----

    async def confirm_order(self, order_id: str, user_id: str) -> Dict[str, Any]:
        """
        Confirm a Pending order and create one production job per line.

        Raises:
            BusinessLogicError: If the order is not Pending or has no items
        """
        order = await self.get_order_doc(order_id)
        check = BusinessRules.can_confirm_order(order)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"order_id": order_id})

        for index, item in enumerate(order["items"]):
            job = build_job_for_item(order, item, index)
            job["line_index"] = index
            job["created_by"] = user_id
            await self.job_repo.create(job)

        await self.order_repo.update(order_id, {
            "status": OrderStatus.CONFIRMED.value,
            "production_status": ProductionStatus.PENDING.value,
            "confirmed_at": datetime.utcnow(),
            "confirmed_by": user_id
        })
        self._log(order_id).info(f"✅ Order {order.get('so_number')} confirmed, {len(order['items'])} jobs created")
        return await self.get_order(order_id)

    async def save_job_and_qc(self, order_id: str, job_id: str, data: JobQCUpdate, user_id: str) -> Dict[str, Any]:
        """
        Save a job's production status with its inspection and roll both
        up into the order.

        Raises:
            NotFoundError: If the job does not belong to the order
            ValidationError: If inspected quantity exceeds the job quantity
        """
        order = await self.get_order_doc(order_id)
        job = await self.job_repo.find_by_id(job_id)
        if not job or job.get("order_id") != order_id:
            raise NotFoundError("Production job", job_id)

        job_qty = float(job.get("qty", 0) or 0)
        validate_numeric_range(data.ok_qty + data.not_ok_qty, 0, job_qty, "OK + Not OK quantity")

        job_update: Dict[str, Any] = {"status": data.job_status}
        if data.job_status == JobStatus.RUNNING.value and not job.get("started_at"):
            job_update["started_at"] = datetime.utcnow()
        if data.job_status == JobStatus.COMPLETED.value:
            job_update["completed_at"] = datetime.utcnow()
        await self.job_repo.update(job_id, job_update)

        await self.inspection_repo.save_for_job(job_id, {
            "order_id": order_id,
            "job_id": job_id,
            "product_id": job.get("product_id"),
            "product_name": job.get("product_name"),
            "qc_status": data.qc_status,
            "ok_qty": data.ok_qty,
            "not_ok_qty": data.not_ok_qty,
            "inspection_date": to_date_str(data.inspection_date) or today_str(),
            "remarks": data.remarks,
            "inspected_by": user_id
        })

        state = await self._refresh_order_state(order)
        self._log(order_id).info(
            f"Job {job_id} saved: {data.job_status}/{data.qc_status} → order {state['status']}"
        )
        return await self.get_order(order_id)

    async def _refresh_order_state(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """Recompute production, QC and derived status and persist them."""
        jobs = await self.job_repo.find_by_order(order["id"])
        inspections = await self.inspection_repo.find_by_order(order["id"])

        rollup = qc_rollup(jobs, inspections)
        state = {
            "production_status": production_summary(jobs)["overall"],
            "qc_status": rollup["qc_status"],
            "ok_qty": rollup["ok_qty"],
            "not_ok_qty": rollup["not_ok_qty"],
            "status": derive_order_status(order, jobs, inspections),
        }
        await self.order_repo.update(order["id"], dict(state))
        return state

    async def update_status(self, order_id: str, target: str, user_id: str) -> Dict[str, Any]:
        """
        Apply a manual post-QC transition.

        Raises:
            BusinessLogicError: If the transition is not allowed
        """
        order = await self.get_order_doc(order_id)
        jobs = await self.job_repo.find_by_order(order_id)
        inspections = await self.inspection_repo.find_by_order(order_id)
        current = derive_order_status(order, jobs, inspections)

        check = BusinessRules.can_transition_order(current, target)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"order_id": order_id})

        update: Dict[str, Any] = {"status": target, "status_changed_by": user_id}
        if target in DELIVERY_FOR_STATUS:
            update["delivery_status"] = DELIVERY_FOR_STATUS[target]
        if target == OrderStatus.DELIVERED.value:
            update["delivered_at"] = datetime.utcnow()
        if target == OrderStatus.CLOSED.value:
            update["closed_at"] = datetime.utcnow()

        await self.order_repo.update(order_id, update)
        self._log(order_id).info(f"Order {order.get('so_number')}: {current} → {target}")
        return await self.get_order(order_id)

    # ---- Views ----

    def _decorate(
        self,
        order: Dict[str, Any],
        jobs: List[Dict[str, Any]],
        inspections: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        status = derive_order_status(order, jobs, inspections)
        return order | {
            "derived_status": status,
            "progress": progress_for_status(status),
            "production_summary": production_summary(jobs),
        }

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        """Order with its jobs, inspections, production summary and derived status."""
        order = await self.get_order_doc(order_id)
        jobs = await self.job_repo.find_by_order(order_id)
        inspections = await self.inspection_repo.find_by_order(order_id)
        detail = self._decorate(order, jobs, inspections)
        detail["jobs"] = jobs
        detail["inspections"] = inspections
        return detail

    async def get_production_summary(self, order_id: str) -> Dict[str, Any]:
        await self.get_order_doc(order_id)
        jobs = await self.job_repo.find_by_order(order_id)
        inspections = await self.inspection_repo.find_by_order(order_id)
        return {
            "order_id": order_id,
            **production_summary(jobs),
            **qc_rollup(jobs, inspections),
        }

    async def list_orders(
        self,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        """
        Orders with derived status and progress.

        The status filter applies to the derived status, so paging happens
        after filtering.
        """
        orders = await self.order_repo.list_orders(customer_id=customer_id, limit=0)
        order_ids = [o["id"] for o in orders]

        jobs_by_order: Dict[str, List[Dict[str, Any]]] = {oid: [] for oid in order_ids}
        for job in await self.job_repo.find_by_orders(order_ids):
            jobs_by_order.setdefault(job["order_id"], []).append(job)
        inspections_by_order: Dict[str, List[Dict[str, Any]]] = {oid: [] for oid in order_ids}
        for insp in await self.inspection_repo.find_by_orders(order_ids):
            inspections_by_order.setdefault(insp["order_id"], []).append(insp)

        result = []
        for order in orders:
            view = self._decorate(order, jobs_by_order[order["id"]], inspections_by_order[order["id"]])
            if status and view["derived_status"] != status:
                continue
            result.append(view)
        return result[skip:skip + limit] if limit else result[skip:]
