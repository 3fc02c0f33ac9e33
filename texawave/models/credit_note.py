"""
Credit note models.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date as date_type


class CreditNoteItem(BaseModel):
    description: str = ""
    qty: float = Field(1, ge=0)
    rate: float = Field(0, ge=0)
    tax_percent: float = Field(18.0, ge=0, le=100)


class CreditNoteCreate(BaseModel):
    """Credit note creation request."""

    customer_id: str
    invoice_id: Optional[str] = None
    credit_note_date: Optional[date_type] = None
    reason: str
    items: List[CreditNoteItem] = Field(..., min_length=1)
    notes: Optional[str] = None


class CreditNoteApply(BaseModel):
    """Apply credit to an open invoice."""

    invoice_id: str
    amount: Optional[float] = Field(None, gt=0, description="Defaults to the largest applicable amount")


class CreditNoteFromInvoice(BaseModel):
    invoice_id: str
    reason: str = "Goods Returned"
