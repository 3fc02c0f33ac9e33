"""
Invoice models.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date as date_type


class InvoiceItem(BaseModel):
    product_id: Optional[str] = None
    description: str = Field(..., min_length=1)
    hsn_code: Optional[str] = None
    unit: str = "pcs"
    qty: float = 0
    rate: float = Field(0, ge=0)
    discount: float = Field(0, ge=0, description="Fixed discount, used when discount_percent is 0")
    discount_percent: float = Field(0, ge=0, le=100)


class InvoiceCreate(BaseModel):
    """Invoice creation request."""

    mode: str = Field("direct", pattern="^(direct|order)$")
    order_id: Optional[str] = None
    customer_id: str
    invoice_date: Optional[date_type] = None
    due_date: Optional[date_type] = None
    currency: str = "INR"
    items: List[InvoiceItem] = Field(..., min_length=1)

    cgst_percent: float = Field(9.0, ge=0, le=100)
    sgst_percent: float = Field(9.0, ge=0, le=100)
    igst_percent: float = Field(18.0, ge=0, le=100)
    apply_cgst: bool = True
    apply_sgst: bool = True
    apply_igst: bool = False

    transport_charge_type: str = Field("fixed", pattern="^(fixed|percent)$")
    transport_charge: float = Field(0, ge=0)
    transport_charge_percent: float = Field(0, ge=0, le=100)
    transport_mode: Optional[str] = "Courier"
    transporter_name: Optional[str] = None

    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_order_mode(self):
        if self.mode == "order" and not self.order_id:
            raise ValueError("order_id is required when mode is 'order'")
        return self
