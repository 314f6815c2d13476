# order_tracking/api/routers/orders.py
from __future__ import annotations

from fastapi import APIRouter

from order_tracking.api.routers import orders_routes
from order_tracking.api.routers.orders_schemas import (
    CancelIn,
    ErrorOut,
    MessageOut,
    OrderLookupOut,
    UploadPaymentOut,
)

router = APIRouter(prefix="/api/order", tags=["orders"])


def _register_all_routes() -> None:
    orders_routes.register(router)


_register_all_routes()

__all__ = [
    "router",
    "CancelIn",
    "ErrorOut",
    "MessageOut",
    "OrderLookupOut",
    "UploadPaymentOut",
]
