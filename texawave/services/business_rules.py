"""
CORE BUSINESS RULES
===================

Status vocabularies and the checks services run before state changes.

SALES ORDER FLOW:
-----------------
1. Quotation (Accepted) or manual entry → Sales Order (Pending)
2. Confirm → one Production Job per line item (Confirmed)
3. Job progress → In Production
4. All jobs completed → QC Pending, all inspections completed → QC Completed
5. Manual: Ready for Dispatch → Delivered
6. Invoice in "order" mode → Invoice Generated
7. Manual: Closed

RULES:
------
- Only Pending orders can be confirmed
- Inspected quantities never exceed the job quantity
- Paid or partially paid invoices cannot be deleted
- Loans are editable only while Pending
- Leaves are processed only once
- Loan overrides and skip-EMI requests are decided only once
"""
from enum import Enum
from typing import Dict, Any, List, Set
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    """Sales order lifecycle."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PRODUCTION = "In Production"
    QC_PENDING = "QC Pending"
    QC_COMPLETED = "QC Completed"
    READY_FOR_DISPATCH = "Ready for Dispatch"
    DELIVERED = "Delivered"
    INVOICE_GENERATED = "Invoice Generated"
    CLOSED = "Closed"


class ProductionStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "inprogress"
    COMPLETED = "completed"


class QCStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "inprogress"
    COMPLETED = "completed"


class OrderInvoiceStatus(str, Enum):
    NOT_GENERATED = "notgenerated"
    PARTIAL = "partial"
    GENERATED = "generated"


class DeliveryStatus(str, Enum):
    NOT_DISPATCHED = "notdispatched"
    IN_TRANSIT = "intransit"
    DELIVERED = "delivered"


class JobStatus(str, Enum):
    """Production job states."""
    NOT_STARTED = "notstarted"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class InspectionStatus(str, Enum):
    """Per-job quality inspection states."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class QuotationStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class PaymentStatus(str, Enum):
    """Invoice payment states."""
    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"
    OVERDUE = "Overdue"


# Invoices that can still receive payment allocations
PAYABLE_INVOICE_STATUSES = {"Unpaid", "Partial", "Draft", "Final", "Overdue", "Partially Paid"}


class CreditNoteStatus(str, Enum):
    OPEN = "Open"
    APPLIED = "Applied"
    CLOSED = "Closed"
    VOID = "Void"


CREDIT_NOTE_REASONS = [
    "Goods Returned",
    "Invoice Overcharge",
    "Damaged Goods",
    "Quality Issue",
    "Discount Applied",
    "Other",
]


class BillStatus(str, Enum):
    OPEN = "Open"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"


class RecurringStatus(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"
    EXPIRED = "Expired"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"
    WEEK_OFF = "Week Off"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LoanStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    REPAID = "Repaid"


class ApprovalStatus(str, Enum):
    """Loan overrides and skip-EMI requests."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


POST_QC_STATUSES: Set[str] = {
    OrderStatus.READY_FOR_DISPATCH.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.INVOICE_GENERATED.value,
    OrderStatus.CLOSED.value,
}

# Transitions an operator may request by hand; everything else is derived
MANUAL_ORDER_TRANSITIONS: Dict[str, Set[str]] = {
    OrderStatus.QC_COMPLETED.value: {OrderStatus.READY_FOR_DISPATCH.value},
    OrderStatus.READY_FOR_DISPATCH.value: {OrderStatus.DELIVERED.value},
    OrderStatus.INVOICE_GENERATED.value: {OrderStatus.CLOSED.value},
}

INVOICEABLE_ORDER_STATUSES: Set[str] = {
    OrderStatus.QC_COMPLETED.value,
    OrderStatus.READY_FOR_DISPATCH.value,
    OrderStatus.DELIVERED.value,
}

QUOTATION_TRANSITIONS: Dict[str, Set[str]] = {
    QuotationStatus.DRAFT.value: {QuotationStatus.SENT.value, QuotationStatus.ACCEPTED.value, QuotationStatus.REJECTED.value},
    QuotationStatus.SENT.value: {QuotationStatus.ACCEPTED.value, QuotationStatus.REJECTED.value},
}


@dataclass
class ValidationResult:
    """Outcome of a business rule check."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]

    @classmethod
    def success(cls, warnings: List[str] = None):
        return cls(is_valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failure(cls, errors: List[str], warnings: List[str] = None):
        return cls(is_valid=False, errors=errors, warnings=warnings or [])


class BusinessRules:
    """
    Centralized business rules.
    Call these before state-changing operations.
    """

    @staticmethod
    def can_confirm_order(order: Dict[str, Any]) -> ValidationResult:
        """An order is confirmable only while Pending and with line items."""
        errors = []
        if order.get("status") != OrderStatus.PENDING.value:
            errors.append(f"Only Pending orders can be confirmed (current: {order.get('status')})")
        if not order.get("items"):
            errors.append("Order has no items to produce")
        if errors:
            return ValidationResult.failure(errors)
        return ValidationResult.success()

    @staticmethod
    def can_transition_order(current: str, target: str) -> ValidationResult:
        """Check a manual status change against MANUAL_ORDER_TRANSITIONS."""
        allowed = MANUAL_ORDER_TRANSITIONS.get(current, set())
        if target not in allowed:
            return ValidationResult.failure(
                [f"Cannot move order from '{current}' to '{target}'"]
            )
        return ValidationResult.success()

    @staticmethod
    def can_invoice_order(order: Dict[str, Any]) -> ValidationResult:
        if order.get("invoice_status") == OrderInvoiceStatus.GENERATED.value:
            return ValidationResult.failure(["Order is already invoiced"])
        if order.get("status") not in INVOICEABLE_ORDER_STATUSES:
            return ValidationResult.failure(
                [f"Order in status '{order.get('status')}' cannot be invoiced"]
            )
        return ValidationResult.success()

    @staticmethod
    def can_delete_invoice(invoice: Dict[str, Any]) -> ValidationResult:
        """Invoices with any payment recorded are kept for audit."""
        if float(invoice.get("paid_amount", 0) or 0) > 0:
            return ValidationResult.failure(["Cannot delete an invoice with payments recorded"])
        return ValidationResult.success()

    @staticmethod
    def can_edit_loan(loan: Dict[str, Any], user: Dict[str, Any]) -> ValidationResult:
        """Loans can be edited only while Pending, by the owner or an admin."""
        errors = []
        if loan.get("status") != LoanStatus.PENDING.value:
            errors.append("Only pending loans can be edited")
        is_owner = (
            (user.get("employee_id") and user.get("employee_id") == loan.get("employee_id"))
            or user.get("user_id") == loan.get("created_by")
        )
        if user.get("role") != "admin" and not is_owner:
            errors.append("Only the requester or an admin can edit this loan")
        if errors:
            return ValidationResult.failure(errors)
        return ValidationResult.success()

    @staticmethod
    def can_change_quotation_status(current: str, target: str) -> ValidationResult:
        """Accepted and Rejected quotations are final."""
        if target not in QUOTATION_TRANSITIONS.get(current, set()):
            return ValidationResult.failure([f"Quotation in status '{current}' cannot become '{target}'"])
        return ValidationResult.success()

    @staticmethod
    def can_process_leave(leave: Dict[str, Any]) -> ValidationResult:
        if leave.get("status") != LeaveStatus.PENDING.value:
            return ValidationResult.failure([f"Leave already {leave.get('status')}"])
        return ValidationResult.success()

    @staticmethod
    def can_decide_request(request: Dict[str, Any], loan: Dict[str, Any] = None) -> ValidationResult:
        """
        Overrides and skip-EMI requests are decided once. An override also
        needs its loan still Pending, since approval fixes the amount.
        """
        errors = []
        if request.get("status") != ApprovalStatus.PENDING.value:
            errors.append(f"Request already {request.get('status')}")
        if loan is not None and loan.get("status") != LoanStatus.PENDING.value:
            errors.append(f"Loan already {loan.get('status')}")
        if errors:
            return ValidationResult.failure(errors)
        return ValidationResult.success()
