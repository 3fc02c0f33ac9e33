"""
Recurring invoice profile models.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date as date_type

from texawave.models.invoice import InvoiceItem

FREQUENCY_PATTERN = "^(weekly|monthly|quarterly|half-yearly|yearly|custom)$"


class RecurringProfileCreate(BaseModel):
    """Recurring invoice profile."""

    profile_name: str = Field(..., min_length=1, max_length=120)
    customer_id: str
    frequency: str = Field("monthly", pattern=FREQUENCY_PATTERN)
    custom_days: Optional[int] = Field(None, ge=1, le=365)
    start_date: date_type
    end_date: Optional[date_type] = None
    currency: str = "INR"
    items: List[InvoiceItem] = Field(..., min_length=1)
    cgst_percent: float = Field(9.0, ge=0, le=100)
    sgst_percent: float = Field(9.0, ge=0, le=100)
    igst_percent: float = Field(18.0, ge=0, le=100)
    apply_cgst: bool = True
    apply_sgst: bool = True
    apply_igst: bool = False
    notes: Optional[str] = None


class RecurringProfileUpdate(BaseModel):
    profile_name: Optional[str] = Field(None, min_length=1, max_length=120)
    status: Optional[str] = Field(None, pattern="^(Active|Paused)$")
    end_date: Optional[date_type] = None
    frequency: Optional[str] = Field(None, pattern=FREQUENCY_PATTERN)
    custom_days: Optional[int] = Field(None, ge=1, le=365)
