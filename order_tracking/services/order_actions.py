# order_tracking/services/order_actions.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from order_tracking.adapters.shopify_client import ShopifyClient
from order_tracking.core import messages
from order_tracking.domain.order_status import (
    PAYMENT_CONFIRMED_TAG,
    add_tag,
    can_cancel,
    parse_tags,
)
from order_tracking.services.errors import BadRequest

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "customer"


async def confirm_payment(client: ShopifyClient, order: Mapping[str, Any]) -> List[str]:
    """
    Tag the order `payment-confirmed`. The full tag list is always written
    back, so confirming twice rewrites the same set.
    """
    tags = add_tag(parse_tags(order.get("tags")), PAYMENT_CONFIRMED_TAG)
    await client.rest(
        f"orders/{order['id']}.json",
        "PUT",
        json={"order": {"id": order["id"], "tags": ", ".join(tags)}},
    )
    logger.info("Payment confirmed on %s (tags=%s)", order.get("name"), tags)
    return tags


async def cancel_order(
    client: ShopifyClient,
    order: Mapping[str, Any],
    reason: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Cancel through the platform and notify the customer.

    The window is checked again here: the order may have changed since the
    customer saw `canCancel` in the lookup response.
    """
    if not can_cancel(order, now=now):
        raise BadRequest(messages.CANNOT_CANCEL, reason="cancel_window_closed")

    resp = await client.rest(
        f"orders/{order['id']}/cancel.json",
        "POST",
        json={"reason": (reason or "").strip() or DEFAULT_CANCEL_REASON, "email": True},
    )
    logger.info("Order %s cancelled", order.get("name"))
    return resp or {}
