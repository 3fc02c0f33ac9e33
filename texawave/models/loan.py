"""
Employee loan models.
"""
from pydantic import BaseModel, Field
from typing import Optional


class LoanCreate(BaseModel):
    """Loan request."""

    employee_id: str
    amount: float = Field(..., gt=0)
    emi_months: int = Field(6, ge=0, le=60)
    reason: str = Field(..., min_length=1, max_length=500)
    override_reason: Optional[str] = Field(None, description="Required when asking above the standard maximum")


class LoanUpdate(BaseModel):
    """Edit a pending loan."""

    amount: Optional[float] = Field(None, gt=0)
    emi_months: Optional[int] = Field(None, ge=0, le=60)
    reason: Optional[str] = Field(None, min_length=1, max_length=500)
    override_reason: Optional[str] = None


class SkipEmiRequest(BaseModel):
    """Ask to skip the EMI of one month."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    reason: str = Field(..., min_length=1, max_length=500)


class PayrollCredit(BaseModel):
    """Payroll credited for an employee and month; triggers EMI deduction."""

    employee_id: str
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    net_amount: Optional[float] = Field(None, ge=0)


class ApprovalDecision(BaseModel):
    """Admin decision on a max-loan override or skip-EMI request."""

    status: str = Field(..., pattern="^(Approved|Rejected)$")
