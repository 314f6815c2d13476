# order_tracking/services/order_view.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from order_tracking.domain.order_status import (
    StatusPolicy,
    can_cancel,
    derive_status,
    parse_platform_datetime,
)
from order_tracking.services.order_lookup import (
    FULFILLMENT_STAGE_KEY,
    PAYMENT_SLIP_KEY,
    find_metafield,
)

PLACEHOLDER_IMAGE = "https://via.placeholder.com/80"


def _amount(raw: Any) -> float:
    """Platform money fields are decimal strings; missing / garbage counts as 0."""
    if raw is None or raw == "":
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def format_price(amount: float, currency: Optional[str]) -> str:
    return f"{amount:.2f} {currency or ''}".rstrip()


def _shipping_amount(order: Mapping[str, Any]) -> float:
    shop_money = ((order.get("total_shipping_price_set") or {}).get("shop_money")) or {}
    return _amount(shop_money.get("amount"))


# Western digits, DD/MM/YYYY; Arabic-locale rendering is left to the storefront
def _display_date(created_at: Optional[datetime]) -> Optional[str]:
    return created_at.strftime("%d/%m/%Y") if created_at else None


def _line_item_view(item: Mapping[str, Any], currency: Optional[str]) -> Dict[str, Any]:
    price = _amount(item.get("price"))
    return {
        "id": item.get("id"),
        "name": item.get("name"),
        "variant": item.get("variant_title") or "",
        "quantity": item.get("quantity"),
        "price": format_price(price, currency),
        "priceAmount": price,
        "image": item.get("image_url") or item.get("product_image") or PLACEHOLDER_IMAGE,
        "sku": item.get("sku"),
    }


def payment_slip_view(metafield: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Either shape the slip metafield can have:
      file_reference -> {"uploaded", "type", "fileId"}
      json           -> {"uploaded", "type", "filename", "mimeType", "size", "uploadedAt"}
    The encoded bytes of an inline slip are never echoed back.
    """
    if not metafield:
        return None

    value = metafield.get("value")
    if metafield.get("type") == "json" or isinstance(value, dict):
        data = value
        if isinstance(value, str):
            try:
                data = json.loads(value)
            except ValueError:
                data = None
        if isinstance(data, dict):
            return {
                "uploaded": True,
                "type": "json",
                "filename": data.get("filename"),
                "mimeType": data.get("mimeType"),
                "size": data.get("size"),
                "uploadedAt": data.get("uploadedAt"),
            }

    return {"uploaded": True, "type": "file_reference", "fileId": value}


def build_order_view(
    order: Mapping[str, Any],
    metafields: Sequence[Mapping[str, Any]],
    *,
    policy: StatusPolicy = StatusPolicy.METAFIELD,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Reshape a platform order plus its metafields into the customer-facing view."""
    currency = order.get("currency")
    created_at = parse_platform_datetime(order.get("created_at"))

    stage_metafield = find_metafield(metafields, FULFILLMENT_STAGE_KEY)
    slip_metafield = find_metafield(metafields, PAYMENT_SLIP_KEY)

    subtotal = _amount(order.get("subtotal_price"))
    shipping = _shipping_amount(order)
    tax = _amount(order.get("total_tax"))
    total = _amount(order.get("total_price"))

    items: List[Dict[str, Any]] = [
        _line_item_view(item, currency) for item in (order.get("line_items") or [])
    ]

    return {
        "id": order.get("id"),
        "number": order.get("name"),
        "date": _display_date(created_at),
        "createdAt": order.get("created_at"),
        "status": derive_status(order, stage_metafield, policy=policy),
        "email": order.get("email"),
        "phone": order.get("phone") or (order.get("customer") or {}).get("phone"),
        "items": items,
        # Pricing
        "subtotal": format_price(subtotal, currency),
        "shipping": format_price(shipping, currency),
        "tax": format_price(tax, currency),
        "total": format_price(total, currency),
        "currency": currency,
        # Raw amounts for client-side arithmetic
        "subtotalAmount": subtotal,
        "shippingAmount": shipping,
        "taxAmount": tax,
        "totalAmount": total,
        # Status & fulfillment
        "financialStatus": order.get("financial_status"),
        "fulfillmentStatus": order.get("fulfillment_status"),
        "cancelled": order.get("cancelled_at") is not None,
        "cancelledAt": order.get("cancelled_at"),
        "paymentSlip": payment_slip_view(slip_metafield),
        "canCancel": can_cancel(order, now=now),
    }
