"""
Customer and vendor models.
Both contact types share the same shape.
"""
from pydantic import BaseModel, Field
from typing import Optional


class ContactCreate(BaseModel):
    """Customer or vendor creation request."""

    name: str = Field(..., min_length=1, max_length=200)
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=15)
    billing_address: Optional[str] = None
    state: Optional[str] = None
    currency: str = Field("INR", min_length=3, max_length=3)
    payment_terms_days: int = Field(30, ge=0)


class ContactUpdate(BaseModel):
    """Contact update request."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=15)
    billing_address: Optional[str] = None
    state: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_terms_days: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
