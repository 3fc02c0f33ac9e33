"""
Employee models.
Employee master data used by attendance, leaves, loans and bonus.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict
from datetime import date as date_type

DEPARTMENT_PATTERN = "^(Staff|Worker|Other Workers|Visitors)$"
EMPLOYEE_STATUS_PATTERN = "^(Active|Inactive|Resigned)$"


class EmployeeCreate(BaseModel):
    """Employee creation request."""

    employee_code: str = Field(..., min_length=1, max_length=20, description="Company employee code, e.g. TW-042")
    name: str = Field(..., min_length=1, max_length=120)
    department: str = Field(..., pattern=DEPARTMENT_PATTERN)
    designation: Optional[str] = None
    joining_date: date_type

    email: Optional[str] = None
    phone: Optional[str] = None

    gross_monthly: float = Field(0, ge=0, description="Gross monthly salary")
    ctc_lpa: Optional[float] = Field(None, ge=0, description="CTC in lakhs per annum")
    pf_enabled: bool = True
    esi_enabled: bool = False
    shift: str = Field("day", pattern="^(day|night)$")

    @field_validator('employee_code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class EmployeeUpdate(BaseModel):
    """Employee update request."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    department: Optional[str] = Field(None, pattern=DEPARTMENT_PATTERN)
    designation: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gross_monthly: Optional[float] = Field(None, ge=0)
    ctc_lpa: Optional[float] = Field(None, ge=0)
    pf_enabled: Optional[bool] = None
    esi_enabled: Optional[bool] = None
    shift: Optional[str] = Field(None, pattern="^(day|night)$")
    status: Optional[str] = Field(None, pattern=EMPLOYEE_STATUS_PATTERN)
    relieving_date: Optional[date_type] = None


class EmployeeStats(BaseModel):
    """Employee statistics."""

    total_employees: int
    active_employees: int
    inactive_employees: int
    by_department: Dict[str, int]
    monthly_payroll: float
