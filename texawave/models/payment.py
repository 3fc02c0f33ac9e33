"""
Payment models: customer receipts and vendor payments.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date as date_type


class PaymentAllocation(BaseModel):
    invoice_id: str
    amount: float = Field(..., ge=0)


class PaymentReceivedCreate(BaseModel):
    """Customer payment, optionally allocated across invoices."""

    customer_id: str
    amount: float
    payment_date: Optional[date_type] = None
    payment_mode: str = "Bank Transfer"
    reference: Optional[str] = None
    bank_charges: float = Field(0, ge=0)
    allocations: List[PaymentAllocation] = []
    notes: Optional[str] = None


class PaymentMadeCreate(BaseModel):
    """Payment to a vendor against a bill."""

    vendor_id: str
    bill_id: str
    amount: float
    payment_date: Optional[date_type] = None
    payment_mode: str = "Bank Transfer"
    reference: Optional[str] = None
    notes: Optional[str] = None
