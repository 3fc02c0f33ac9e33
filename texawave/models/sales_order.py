"""
Sales order, production job and inspection models.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date as date_type


class OrderItem(BaseModel):
    """
    Order line. Lines copied from quotations may identify the product by
    product_id, sku or id, so unknown keys are kept.
    """

    model_config = ConfigDict(extra="allow")

    product_id: Optional[str] = None
    sku: Optional[str] = None
    product_name: Optional[str] = None
    product_description: Optional[str] = None
    unit: str = "pcs"
    qty: float = Field(..., gt=0)
    rate: float = Field(0, ge=0)
    amount: Optional[float] = Field(None, ge=0)


class SalesOrderFromQuotation(BaseModel):
    """Convert an accepted quotation into a sales order."""

    quotation_id: str
    delivery_date: Optional[date_type] = None
    instructions: Optional[str] = None
    po_number: Optional[str] = None


class SalesOrderCreate(BaseModel):
    """Manually entered sales order."""

    customer_id: str
    items: List[OrderItem] = Field(..., min_length=1)
    currency: str = "INR"
    cgst_percent: float = Field(9.0, ge=0, le=100)
    sgst_percent: float = Field(9.0, ge=0, le=100)
    transport_percent: float = Field(0.0, ge=0, le=100)
    delivery_date: Optional[date_type] = None
    instructions: Optional[str] = None
    po_number: Optional[str] = None


class SalesOrderUpdate(BaseModel):
    """Only delivery date and instructions are editable."""

    delivery_date: Optional[date_type] = None
    instructions: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    """Manual post-QC transition."""

    status: str = Field(..., pattern="^(Ready for Dispatch|Delivered|Closed)$")


class JobQCUpdate(BaseModel):
    """Save a production job status together with its inspection."""

    job_status: str = Field(..., pattern="^(notstarted|running|paused|completed)$")
    qc_status: str = Field("pending", pattern="^(pending|in-progress|completed)$")
    ok_qty: float = Field(0, ge=0)
    not_ok_qty: float = Field(0, ge=0)
    inspection_date: Optional[date_type] = None
    remarks: Optional[str] = None
