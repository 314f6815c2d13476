# order_tracking/domain/order_status.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence


class StatusPolicy(str, Enum):
    """Who controls the displayed fulfillment stage."""

    METAFIELD = "metafield"  # staff-set custom.fulfillment_stage
    PLATFORM = "platform"  # platform fulfillment status + payment-confirmed tag


class OrderStatus(str, Enum):
    CANCELLED = "cancelled"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CONFIRMED = "confirmed"
    PENDING_PAYMENT = "pending_payment"


PAYMENT_CONFIRMED_TAG = "payment-confirmed"

CANCEL_WINDOW = timedelta(days=3)

# Stages staff may set through the fulfillment_stage metafield
STAFF_STAGES = {
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
}

# platform fulfillment_status -> display status (platform policy only)
FULFILLMENT_STATUS_MAP: Dict[str, OrderStatus] = {
    "fulfilled": OrderStatus.DELIVERED,
    "partial": OrderStatus.SHIPPED,
    "shipped": OrderStatus.SHIPPED,
}

PENDING_FINANCIAL_STATUSES = {"pending", "authorized", "partially_paid"}

# Fulfillment states after which the customer can no longer cancel
NON_CANCELLABLE_FULFILLMENT = {"fulfilled", "shipped"}


def parse_tags(raw: Any) -> List[str]:
    """
    Platform tags come back as one comma separated string ("a, b, c").
    Blank entries are dropped, order is kept.
    """
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        parts: Sequence[Any] = raw
    else:
        parts = str(raw).split(",")
    return [str(p).strip() for p in parts if str(p).strip()]


def add_tag(tags: Sequence[str], tag: str) -> List[str]:
    """Order-preserving set union of `tags` and `tag`."""
    out: List[str] = []
    for t in list(tags) + [tag]:
        if t not in out:
            out.append(t)
    return out


def parse_platform_datetime(raw: Any) -> Optional[datetime]:
    """ISO-8601 from the platform (offset or trailing Z); naive values are taken as UTC."""
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _stage_from_metafield(fulfillment_stage: Any) -> Optional[str]:
    value = fulfillment_stage
    if isinstance(fulfillment_stage, Mapping):
        value = fulfillment_stage.get("value")
    if not value or not isinstance(value, str):
        return None
    stage = value.strip().lower()
    return stage if stage in STAFF_STAGES else None


def _stage_from_platform(order: Mapping[str, Any]) -> Optional[str]:
    fulfillment = (order.get("fulfillment_status") or "").lower()
    mapped = FULFILLMENT_STATUS_MAP.get(fulfillment)
    if mapped is not None:
        return mapped.value
    if PAYMENT_CONFIRMED_TAG in parse_tags(order.get("tags")):
        return OrderStatus.PROCESSING.value
    return None


def derive_status(
    order: Mapping[str, Any],
    fulfillment_stage: Any = None,
    *,
    policy: StatusPolicy = StatusPolicy.METAFIELD,
) -> str:
    """
    Display status for an order. First matching rule wins:

    1. cancelled_at set                     -> cancelled
    2. stage (per policy)                   -> processing / shipped / delivered
    3. financial_status == paid             -> confirmed
    4. pending / authorized / partially_paid -> pending_payment
    5. anything else                        -> pending_payment

    `fulfillment_stage` is the raw metafield dict (or its value); it is only
    consulted under the metafield policy.
    """
    if order.get("cancelled_at"):
        return OrderStatus.CANCELLED.value

    if StatusPolicy(policy) is StatusPolicy.METAFIELD:
        stage = _stage_from_metafield(fulfillment_stage)
    else:
        stage = _stage_from_platform(order)
    if stage:
        return stage

    financial = order.get("financial_status")
    if financial == "paid":
        return OrderStatus.CONFIRMED.value
    if financial in PENDING_FINANCIAL_STATUSES:
        return OrderStatus.PENDING_PAYMENT.value

    return OrderStatus.PENDING_PAYMENT.value


def can_cancel(order: Mapping[str, Any], *, now: Optional[datetime] = None) -> bool:
    """
    Customer-side cancellation is allowed while the order is not cancelled,
    not fulfilled/shipped, and at most CANCEL_WINDOW old (inclusive).
    """
    if order.get("cancelled_at"):
        return False

    if order.get("fulfillment_status") in NON_CANCELLABLE_FULFILLMENT:
        return False

    created_at = parse_platform_datetime(order.get("created_at"))
    if created_at is None:
        return False

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current - created_at <= CANCEL_WINDOW
