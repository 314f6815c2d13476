# order_tracking/api/deps.py
from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Request

from order_tracking.adapters.shopify_client import ShopifyClient, open_shopify_client
from order_tracking.core.config import AppSettings


def get_app_settings(request: Request) -> AppSettings:
    """Settings handed to `create_app` at startup."""
    return request.app.state.settings


async def get_platform_client(request: Request) -> AsyncGenerator[ShopifyClient, None]:
    """
    One platform client per inbound request, closed when the request ends.

    `app.state.platform_transport` is None in production; tests put an
    httpx.MockTransport there.
    """
    settings: AppSettings = request.app.state.settings
    transport = getattr(request.app.state, "platform_transport", None)
    async with open_shopify_client(settings, transport=transport) as client:
        yield client
