# order_tracking/api/routers/orders_schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Python names inside, camelCase on the wire (the storefront reads camelCase)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineItemOut(_CamelModel):
    id: Optional[int] = None
    name: Optional[str] = None
    variant: str = ""
    quantity: Optional[int] = None
    price: str
    price_amount: float
    image: str
    sku: Optional[str] = None


class OrderViewOut(_CamelModel):
    id: Optional[int] = None
    number: Optional[str] = None
    date: Optional[str] = None
    created_at: Optional[str] = None
    status: str
    email: Optional[str] = None
    phone: Optional[str] = None
    items: List[LineItemOut] = Field(default_factory=list)

    subtotal: str
    shipping: str
    tax: str
    total: str
    currency: Optional[str] = None

    subtotal_amount: float
    shipping_amount: float
    tax_amount: float
    total_amount: float

    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    cancelled: bool
    cancelled_at: Optional[str] = None

    payment_slip: Optional[Dict[str, Any]] = None
    can_cancel: bool


class OrderLookupOut(BaseModel):
    success: bool = True
    order: OrderViewOut


class UploadedFileOut(_CamelModel):
    name: str
    size: int
    uploaded_at: str


class UploadPaymentOut(BaseModel):
    success: bool = True
    message: str
    file: UploadedFileOut


class MessageOut(BaseModel):
    success: bool = True
    message: str


class ErrorOut(BaseModel):
    success: bool = False
    error: str


class CancelIn(BaseModel):
    model_config = ConfigDict(extra="ignore")
    reason: Optional[str] = Field(None, description="free text; defaults to `customer`")


class ServiceInfoOut(BaseModel):
    status: str = "running"
    message: str
    version: str
