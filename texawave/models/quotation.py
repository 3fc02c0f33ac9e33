"""
Quotation models.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date as date_type


class QuotationItem(BaseModel):
    product_id: Optional[str] = None
    product_name: str = Field(..., min_length=1)
    product_description: Optional[str] = None
    unit: str = "pcs"
    qty: float = Field(..., gt=0)
    rate: float = Field(..., ge=0)


class QuotationCreate(BaseModel):
    """Quotation creation request."""

    customer_id: str
    quotation_date: Optional[date_type] = None
    valid_until: Optional[date_type] = None
    delivery_term: Optional[date_type] = Field(None, description="Promised delivery date")
    currency: str = "INR"
    cgst_percent: float = Field(9.0, ge=0, le=100)
    sgst_percent: float = Field(9.0, ge=0, le=100)
    transport_percent: float = Field(0.0, ge=0, le=100)
    items: List[QuotationItem] = Field(..., min_length=1)
    notes: Optional[str] = None


class QuotationStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(Draft|Sent|Accepted|Rejected)$")
