"""
Leave request models.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date as date_type


class LeaveCreate(BaseModel):
    """Leave application."""

    employee_id: str
    leave_type: str = Field("Casual Leave", max_length=60)
    start_date: date_type
    end_date: date_type
    reason: str = Field(..., min_length=1, max_length=500)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class LeaveDecision(BaseModel):
    """Approve/reject payload."""

    remarks: Optional[str] = None
