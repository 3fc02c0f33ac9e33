"""
Vendor bill models.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date as date_type


class BillItem(BaseModel):
    description: str = Field(..., min_length=1)
    qty: float = Field(1, ge=0)
    rate: float = Field(0, ge=0)
    tax_percent: float = Field(18.0, ge=0, le=100)


class BillCreate(BaseModel):
    """Bill received from a vendor."""

    vendor_id: str
    vendor_bill_number: Optional[str] = None
    bill_date: Optional[date_type] = None
    due_date: Optional[date_type] = None
    items: List[BillItem] = Field(..., min_length=1)
    paid_amount: float = Field(0, ge=0)
    notes: Optional[str] = None
