"""
Loan service.

Employee salary advances repaid by monthly EMIs deducted from payroll.
Requests above three months of gross salary need an approved override;
an EMI month can be skipped with admin approval.
"""
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging
import math

from texawave.repositories.loan_repository import LoanRepository, PayrollCreditRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.exceptions import (
    NotFoundError,
    ValidationError,
    BusinessLogicError,
    AuthorizationError
)
from texawave.models.loan import LoanCreate, LoanUpdate, SkipEmiRequest
from texawave.services.business_rules import BusinessRules, LoanStatus, ApprovalStatus
from texawave.utils.dates import current_month, previous_month, today_str

logger = logging.getLogger(__name__)

STANDARD_MAX_MULTIPLIER = 3
PAYROLL_DEDUCTION_SOURCE = "Payroll Auto-Deduction"


def calculate_emi(amount: float, emi_months: int) -> float:
    """EMI rounded up to the rupee; the whole amount when months is 0."""
    if emi_months and emi_months > 0:
        return float(math.ceil(amount / emi_months))
    return float(amount)


def standard_max_loan(gross_monthly: float) -> float:
    return float(gross_monthly or 0) * STANDARD_MAX_MULTIPLIER


def remaining_balance(loan: Dict[str, Any]) -> float:
    """Approved amount minus EMIs credited through payroll, floored at 0."""
    approved = loan.get("approved_amount")
    if not approved:
        return float(loan.get("amount", 0) or 0)
    paid = sum(
        float(p.get("amount", 0) or 0)
        for p in (loan.get("emi_payments") or {}).values()
        if p.get("payroll_credited")
    )
    return max(0.0, float(approved) - paid)


def emi_due_for_month(loan: Dict[str, Any], month: str) -> float:
    """EMI an approved loan will take from a month's salary."""
    if loan.get("status") != LoanStatus.APPROVED.value:
        return 0.0
    if remaining_balance(loan) <= 0:
        return 0.0
    skip = (loan.get("skip_requests") or {}).get(month)
    if skip and skip.get("status") == ApprovalStatus.APPROVED.value:
        return 0.0
    payment = (loan.get("emi_payments") or {}).get(month)
    if payment and payment.get("payroll_credited"):
        return 0.0
    return float(loan.get("emi_amount", 0) or 0)


def current_emi_load(loans: List[Dict[str, Any]], month: str) -> float:
    return sum(emi_due_for_month(loan, month) for loan in loans)


class LoanService:
    """Service for employee loans."""

    def __init__(
        self,
        loan_repo: LoanRepository,
        payroll_credit_repo: PayrollCreditRepository,
        employee_repo: EmployeeRepository
    ):
        self.loan_repo = loan_repo
        self.payroll_credit_repo = payroll_credit_repo
        self.employee_repo = employee_repo

    async def _get_employee(self, employee_id: str) -> Dict[str, Any]:
        employee = await self.employee_repo.find_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def get_loan(self, loan_id: str) -> Dict[str, Any]:
        loan = await self.loan_repo.find_by_id(loan_id)
        if not loan:
            raise NotFoundError("Loan", loan_id)
        loan["remaining_balance"] = remaining_balance(loan)
        return loan

    async def _check_affordability(
        self,
        employee: Dict[str, Any],
        amount: float,
        emi_months: int,
        is_admin: bool,
        override_reason: Optional[str],
        approved_override: Optional[Dict[str, Any]] = None,
        exclude_loan_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Validate a requested amount against salary and existing EMIs.

        Returns:
            Dict with emi_amount, standard_max, needs_override

        Raises:
            BusinessLogicError: If net salary would go negative or an admin exceeds the limit
            ValidationError: If an override reason is required but missing
        """
        gross = float(employee.get("gross_monthly", 0) or 0)
        standard_max = standard_max_loan(gross)
        approved_max = (
            float(approved_override.get("requested_amount", standard_max))
            if approved_override else standard_max
        )

        loans = await self.loan_repo.find_by_employee(employee["id"], LoanStatus.APPROVED.value)
        loans = [l for l in loans if l["id"] != exclude_loan_id]
        emi_load = current_emi_load(loans, current_month())
        new_emi = calculate_emi(amount, emi_months)

        net_after = gross - emi_load - new_emi
        if net_after < 0:
            raise BusinessLogicError(
                "Net salary cannot be negative after this loan",
                details={"gross": gross, "current_emi": emi_load, "new_emi": new_emi}
            )

        needs_override = False
        if is_admin:
            if amount > approved_max:
                raise BusinessLogicError(
                    f"Maximum allowed: {approved_max:.2f}",
                    details={"standard_max": standard_max, "approved_max": approved_max}
                )
        elif amount > standard_max and not approved_override:
            if not (override_reason or "").strip():
                raise ValidationError(
                    "Reason required to request more than the standard limit",
                    details={"standard_max": standard_max}
                )
            needs_override = True

        return {"emi_amount": new_emi, "standard_max": standard_max, "needs_override": needs_override, "gross": gross}

    async def request_loan(self, data: LoanCreate, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit a loan request.

        Non-admins asking above 3× gross create a pending max-loan override
        that an admin must approve before the full amount is disbursed.
        """
        employee = await self._get_employee(data.employee_id)
        is_admin = user.get("role") == "admin"

        check = await self._check_affordability(
            employee, data.amount, data.emi_months, is_admin, data.override_reason
        )

        loan_doc: Dict[str, Any] = {
            "employee_id": employee["id"],
            "employee_code": employee.get("employee_code"),
            "employee_name": employee.get("name"),
            "amount": float(data.amount),
            "emi_months": data.emi_months,
            "emi_amount": check["emi_amount"],
            "reason": data.reason,
            "status": LoanStatus.PENDING.value,
            "request_date": today_str(),
            "requested_at": datetime.utcnow(),
            "created_by": user["user_id"],
            "emi_payments": {},
            "skip_requests": {},
            "max_loan_override": None
        }

        if check["needs_override"]:
            loan_doc["max_loan_override"] = {
                "requested_amount": float(data.amount),
                "requested_by": user["user_id"],
                "requested_at": datetime.utcnow(),
                "status": ApprovalStatus.PENDING.value,
                "reason": data.override_reason.strip(),
                "employee_gross": check["gross"],
                "standard_max": check["standard_max"]
            }

        loan_id = await self.loan_repo.create(loan_doc)
        logger.info(
            f"Loan requested: {employee.get('employee_code')} amount={data.amount} "
            f"emi={check['emi_amount']} override={check['needs_override']}"
        )
        return await self.get_loan(loan_id)

    async def update_loan(
        self,
        loan_id: str,
        data: LoanUpdate,
        user: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Edit a pending loan.

        Raises:
            AuthorizationError: If the user is neither owner nor admin
            BusinessLogicError: If the loan is no longer pending
        """
        loan = await self.get_loan(loan_id)
        check = BusinessRules.can_edit_loan(loan, user)
        if not check.is_valid:
            if loan.get("status") != LoanStatus.PENDING.value:
                raise BusinessLogicError(check.errors[0], details={"loan_id": loan_id})
            raise AuthorizationError(check.errors[0])

        changes = data.model_dump(exclude_unset=True)
        override_reason = changes.pop("override_reason", None)
        amount = float(changes.get("amount", loan["amount"]))
        emi_months = changes.get("emi_months", loan.get("emi_months", 6))

        employee = await self._get_employee(loan["employee_id"])
        override = loan.get("max_loan_override")
        approved_override = override if override and override.get("status") == ApprovalStatus.APPROVED.value else None

        affordability = await self._check_affordability(
            employee,
            amount,
            emi_months,
            user.get("role") == "admin",
            override_reason or (override or {}).get("reason"),
            approved_override=approved_override,
            exclude_loan_id=loan_id
        )

        update = {**changes, "amount": amount, "emi_months": emi_months, "emi_amount": affordability["emi_amount"]}
        if affordability["needs_override"] and not override:
            update["max_loan_override"] = {
                "requested_amount": amount,
                "requested_by": user["user_id"],
                "requested_at": datetime.utcnow(),
                "status": ApprovalStatus.PENDING.value,
                "reason": (override_reason or "").strip(),
                "employee_gross": affordability["gross"],
                "standard_max": affordability["standard_max"]
            }
        elif affordability["needs_override"] and override.get("status") == ApprovalStatus.PENDING.value:
            update["max_loan_override.requested_amount"] = amount

        await self.loan_repo.update(loan_id, update)
        logger.info(f"Loan updated: {loan_id}")
        return await self.get_loan(loan_id)

    async def approve_loan(self, loan_id: str, admin: Dict[str, Any]) -> Dict[str, Any]:
        """
        Approve a pending loan.

        Without an approved override the amount is capped at the standard
        maximum; the EMI is recomputed on the final amount.
        """
        loan = await self.get_loan(loan_id)
        if loan.get("status") != LoanStatus.PENDING.value:
            raise BusinessLogicError(f"Loan already {loan.get('status')}", details={"loan_id": loan_id})

        employee = await self._get_employee(loan["employee_id"])
        override = loan.get("max_loan_override") or {}
        override_approved = override.get("status") == ApprovalStatus.APPROVED.value
        standard_max = float(override.get("standard_max") or standard_max_loan(employee.get("gross_monthly", 0)))

        final_amount = float(loan["amount"]) if override_approved else min(float(loan["amount"]), standard_max)
        final_emi = calculate_emi(final_amount, loan.get("emi_months", 0))

        update = {
            "status": LoanStatus.APPROVED.value,
            "approved_by": admin.get("name") or admin["user_id"],
            "approved_at": datetime.utcnow(),
            "approved_amount": final_amount,
            "remaining_balance": final_amount,
            "emi_amount": final_emi,
            "disbursed_date": today_str()
        }
        await self.loan_repo.update(loan_id, update)

        if final_amount < float(loan["amount"]):
            logger.info(f"✅ Loan {loan_id} approved with standard limit: {final_amount:.2f}")
        else:
            logger.info(f"✅ Loan {loan_id} approved: {final_amount:.2f}")
        return await self.get_loan(loan_id)

    async def reject_loan(self, loan_id: str, admin: Dict[str, Any]) -> Dict[str, Any]:
        loan = await self.get_loan(loan_id)
        if loan.get("status") != LoanStatus.PENDING.value:
            raise BusinessLogicError(f"Loan already {loan.get('status')}", details={"loan_id": loan_id})
        await self.loan_repo.update(loan_id, {
            "status": LoanStatus.REJECTED.value,
            "approved_by": admin.get("name") or admin["user_id"],
            "approved_at": datetime.utcnow()
        })
        logger.info(f"Loan rejected: {loan_id}")
        return await self.get_loan(loan_id)

    async def decide_override(self, loan_id: str, status: str, admin: Dict[str, Any]) -> Dict[str, Any]:
        """
        Approve or reject the max-loan override attached to a loan.

        Raises:
            NotFoundError: If the loan carries no override
            BusinessLogicError: If the override or the loan is already decided
        """
        loan = await self.get_loan(loan_id)
        override = loan.get("max_loan_override")
        if not override:
            raise NotFoundError("Max loan override", loan_id)

        check = BusinessRules.can_decide_request(override, loan)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"loan_id": loan_id})

        override.update({
            "status": status,
            "approved_by": admin.get("name") or admin["user_id"],
            "approved_at": datetime.utcnow()
        })
        await self.loan_repo.update(loan_id, {"max_loan_override": override})
        logger.info(f"Override {status.lower()} for loan {loan_id}")
        return await self.get_loan(loan_id)

    async def request_skip_emi(self, loan_id: str, data: SkipEmiRequest, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Ask to skip one month's EMI.

        Raises:
            BusinessLogicError: If the loan is not approved or the month is already skipped
        """
        loan = await self.get_loan(loan_id)
        if loan.get("status") != LoanStatus.APPROVED.value:
            raise BusinessLogicError("Skip EMI is only available for approved loans")

        existing = (loan.get("skip_requests") or {}).get(data.month)
        if existing and existing.get("status") == ApprovalStatus.APPROVED.value:
            raise BusinessLogicError(f"EMI for {data.month} is already skipped")

        await self.loan_repo.set_month_entry(loan_id, "skip_requests", data.month, {
            "status": ApprovalStatus.PENDING.value,
            "requested_by": user["user_id"],
            "requested_at": datetime.utcnow(),
            "reason": data.reason.strip()
        })
        logger.info(f"Skip EMI requested for {data.month} on loan {loan_id}")
        return await self.get_loan(loan_id)

    async def decide_skip_emi(self, loan_id: str, month: str, status: str, admin: Dict[str, Any]) -> Dict[str, Any]:
        loan = await self.get_loan(loan_id)
        request = (loan.get("skip_requests") or {}).get(month)
        if not request:
            raise NotFoundError("Skip EMI request", f"{loan_id}/{month}")

        check = BusinessRules.can_decide_request(request)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"loan_id": loan_id, "month": month})

        request.update({
            "status": status,
            "approved_by": admin.get("name") or admin["user_id"],
            "approved_at": datetime.utcnow()
        })
        await self.loan_repo.set_month_entry(loan_id, "skip_requests", month, request)
        logger.info(f"Skip EMI {status.lower()} for {month} on loan {loan_id}")
        return await self.get_loan(loan_id)

    async def credit_payroll(
        self,
        employee_id: str,
        month: str,
        admin: Dict[str, Any],
        net_amount: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Mark payroll credited for an employee and deduct due EMIs.

        Each approved loan not yet deducted this month pays
        min(EMI, remaining balance); a loan reaching zero becomes Repaid.

        Returns:
            Dict with the month and the deductions made
        """
        employee = await self._get_employee(employee_id)

        await self.payroll_credit_repo.upsert(
            {"employee_id": employee_id, "month": month},
            {"credited": True, "credited_by": admin["user_id"], "net_amount": net_amount}
        )

        deductions = []
        for loan in await self.loan_repo.find_by_employee(employee_id, LoanStatus.APPROVED.value):
            emi_due = emi_due_for_month(loan, month)
            if emi_due <= 0:
                continue

            remaining = remaining_balance(loan)
            emi_to_pay = min(emi_due, remaining)
            new_balance = remaining - emi_to_pay

            await self.loan_repo.set_month_entry(loan["id"], "emi_payments", month, {
                "month": month,
                "amount": emi_to_pay,
                "paid_at": datetime.utcnow(),
                "payroll_credited": True,
                "remaining_balance": new_balance,
                "deducted_from": PAYROLL_DEDUCTION_SOURCE
            })
            update: Dict[str, Any] = {"remaining_balance": new_balance}
            if new_balance <= 0:
                update["status"] = LoanStatus.REPAID.value
            await self.loan_repo.update(loan["id"], update)

            deductions.append({"loan_id": loan["id"], "amount": emi_to_pay, "remaining_balance": new_balance})
            logger.info(
                f"EMI auto-deducted for {employee.get('name')}: {emi_to_pay:.2f}, remaining {new_balance:.2f}"
            )

        return {
            "employee_id": employee_id,
            "month": month,
            "total_deducted": sum(d["amount"] for d in deductions),
            "deductions": deductions
        }

    async def list_loans(
        self,
        status: Optional[str] = None,
        employee_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        loans = await self.loan_repo.list_loans(status, employee_id, skip, limit)
        for loan in loans:
            loan["remaining_balance"] = remaining_balance(loan)
        return loans

    async def get_stats(self, employee_id: Optional[str] = None, month: Optional[str] = None) -> Dict[str, Any]:
        """
        Loan statistics, overall or for one employee.

        Args:
            employee_id: Limit to one employee
            month: Reference month (YYYY-MM); "last month" is the one before it
        """
        loans = await self.loan_repo.list_loans(employee_id=employee_id, limit=0)
        approved = [l for l in loans if l.get("status") == LoanStatus.APPROVED.value]
        pending = [l for l in loans if l.get("status") == LoanStatus.PENDING.value]
        last_month = previous_month(month or current_month())

        last_month_emi = 0.0
        for loan in loans:
            payment = (loan.get("emi_payments") or {}).get(last_month)
            if payment and payment.get("payroll_credited"):
                last_month_emi += float(payment.get("amount", 0) or 0)

        return {
            "total_loans": len(loans),
            "approved_count": len(approved),
            "pending_count": len(pending),
            "repaid_count": sum(1 for l in loans if l.get("status") == LoanStatus.REPAID.value),
            "total_approved_amount": sum(float(l.get("approved_amount") or l.get("amount", 0)) for l in approved),
            "total_pending_amount": sum(float(l.get("amount", 0)) for l in pending),
            "total_outstanding": sum(remaining_balance(l) for l in approved),
            "last_month": last_month,
            "last_month_emi_deduction": last_month_emi,
            "override_requests_count": sum(
                1 for l in loans
                if (l.get("max_loan_override") or {}).get("status") == ApprovalStatus.PENDING.value
            )
        }
