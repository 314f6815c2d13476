# order_tracking/services/order_lookup.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from order_tracking.adapters.shopify_client import ShopifyClient
from order_tracking.services.errors import OrderNotFound

logger = logging.getLogger(__name__)

METAFIELD_NAMESPACE = "custom"
PAYMENT_SLIP_KEY = "payment_slip"
FULFILLMENT_STAGE_KEY = "fulfillment_stage"


def clean_order_number(raw: str) -> str:
    """`#1006`, ` 1006 ` and `1006` all become `1006`."""
    return (raw or "").strip().lstrip("#").strip()


async def find_order(client: ShopifyClient, order_number: str) -> Dict[str, Any]:
    """
    Look an order up by its display name over any status.
    Several matches: the first one wins.
    """
    number = clean_order_number(order_number)
    if not number:
        raise OrderNotFound(order_number)

    resp = await client.rest("orders.json", params={"name": number, "status": "any"})
    orders = (resp or {}).get("orders") or []
    if not orders:
        raise OrderNotFound(number)

    order = orders[0]
    logger.info("Order found: %s", order.get("name"))
    return order


async def list_order_metafields(client: ShopifyClient, order_id: Any) -> List[Dict[str, Any]]:
    resp = await client.rest(f"orders/{order_id}/metafields.json")
    return list((resp or {}).get("metafields") or [])


def find_metafield(
    metafields: Sequence[Mapping[str, Any]],
    key: str,
    *,
    namespace: str = METAFIELD_NAMESPACE,
) -> Optional[Mapping[str, Any]]:
    for mf in metafields:
        if mf.get("namespace") == namespace and mf.get("key") == key:
            return mf
    return None


async def upsert_order_metafield(
    client: ShopifyClient,
    order_id: Any,
    *,
    key: str,
    value: str,
    type_: str,
    namespace: str = METAFIELD_NAMESPACE,
) -> Dict[str, Any]:
    """
    Metafields are unique per (namespace, key): read first, then update the
    existing entry or create a new one.
    """
    metafield = {"namespace": namespace, "key": key, "value": value, "type": type_}

    existing = find_metafield(await list_order_metafields(client, order_id), key, namespace=namespace)
    if existing:
        logger.info("Updating metafield %s.%s on order %s", namespace, key, order_id)
        resp = await client.rest(
            f"orders/{order_id}/metafields/{existing['id']}.json",
            "PUT",
            json={"metafield": {"id": existing["id"], **metafield}},
        )
    else:
        logger.info("Creating metafield %s.%s on order %s", namespace, key, order_id)
        resp = await client.rest(
            f"orders/{order_id}/metafields.json",
            "POST",
            json={"metafield": metafield},
        )
    return (resp or {}).get("metafield") or {}
