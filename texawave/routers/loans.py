"""
Loans router.
Employee loans, max-loan overrides, skip-EMI requests and payroll
auto-deduction.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.loan_repository import LoanRepository, PayrollCreditRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.services.loan_service import LoanService
from texawave.models.loan import LoanCreate, LoanUpdate, SkipEmiRequest, PayrollCredit, ApprovalDecision
from texawave.exceptions import validate_month_format
from texawave.utils.dependencies import get_current_user, get_current_admin_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_loan_service() -> LoanService:
    """Get loan service with injected dependencies."""
    db = Database.get_db()
    return LoanService(
        LoanRepository(db[Collections.LOANS]),
        PayrollCreditRepository(db[Collections.PAYROLL_CREDITS]),
        EmployeeRepository(db[Collections.EMPLOYEES])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Request loan",
    description="Request a loan repaid by monthly EMIs"
)
async def request_loan(
    data: LoanCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    """
    Request a loan.

    **Request Body:**
    - **employee_id**: Employee ID
    - **amount**: Loan amount
    - **emi_months**: Number of EMIs (default 6)
    - **reason**: Purpose of the loan
    - **override_reason**: Required above 3 × gross monthly salary

    **Raises:**
    - 400: Above the standard maximum without an override reason
    - 422: Net salary would go negative, or an admin exceeds the maximum
    """
    return await service.request_loan(data, current_user)


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List loans"
)
async def list_loans(
    employee_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LoanService = Depends(get_loan_service)
) -> List[Dict[str, Any]]:
    return await service.list_loans(status_filter, employee_id, pagination["skip"], pagination["limit"])


@router.get(
    "/stats",
    response_model=Dict[str, Any],
    summary="Loan statistics",
    description="Totals by status, outstanding balance, last month EMI and pending overrides"
)
async def get_loan_stats(
    employee_id: Optional[str] = Query(None, description="Limit to one employee"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    return await service.get_stats(employee_id)


@router.post(
    "/payroll-credit",
    response_model=Dict[str, Any],
    summary="Credit payroll (Admin only)",
    description="Mark payroll credited and auto-deduct due EMIs"
)
async def credit_payroll(
    data: PayrollCredit,
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    """
    Credit an employee's payroll for a month.

    Every approved loan not yet deducted that month pays its EMI (capped
    at the remaining balance), unless the month's EMI was skipped.
    """
    return await service.credit_payroll(data.employee_id, data.month, admin_user, data.net_amount)


@router.get(
    "/{loan_id}",
    response_model=Dict[str, Any],
    summary="Get loan"
)
async def get_loan(
    loan_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    return await service.get_loan(loan_id)


@router.put(
    "/{loan_id}",
    response_model=Dict[str, Any],
    summary="Edit pending loan",
    description="Owner or admin, only while Pending"
)
async def update_loan(
    loan_id: str = Path(...),
    data: LoanUpdate = ...,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    return await service.update_loan(loan_id, data, current_user)


@router.post(
    "/{loan_id}/approve",
    response_model=Dict[str, Any],
    summary="Approve loan (Admin only)"
)
async def approve_loan(
    loan_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    """
    Approve a pending loan.

    Without an approved override the amount is capped at 3 × gross.
    """
    return await service.approve_loan(loan_id, admin_user)


@router.post(
    "/{loan_id}/reject",
    response_model=Dict[str, Any],
    summary="Reject loan (Admin only)"
)
async def reject_loan(
    loan_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    return await service.reject_loan(loan_id, admin_user)


@router.post(
    "/{loan_id}/override",
    response_model=Dict[str, Any],
    summary="Decide max-loan override (Admin only)"
)
async def decide_override(
    decision: ApprovalDecision,
    loan_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    return await service.decide_override(loan_id, decision.status, admin_user)


@router.post(
    "/{loan_id}/skip-emi",
    response_model=Dict[str, Any],
    summary="Request EMI skip"
)
async def request_skip_emi(
    data: SkipEmiRequest,
    loan_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    """
    Ask to skip one month's EMI of an approved loan.

    **Raises:**
    - 422: Loan not approved, or the month is already skipped
    """
    return await service.request_skip_emi(loan_id, data, current_user)


@router.post(
    "/{loan_id}/skip-emi/{month}",
    response_model=Dict[str, Any],
    summary="Decide EMI skip (Admin only)"
)
async def decide_skip_emi(
    decision: ApprovalDecision,
    loan_id: str = Path(...),
    month: str = Path(..., description="Month (YYYY-MM)"),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LoanService = Depends(get_loan_service)
) -> Dict[str, Any]:
    validate_month_format(month)
    return await service.decide_skip_emi(loan_id, month, decision.status, admin_user)
