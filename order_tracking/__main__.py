# order_tracking/__main__.py
from __future__ import annotations

import logging

import uvicorn

from order_tracking.core.config import get_settings
from order_tracking.core.logging import setup_logging

logger = logging.getLogger("order_tracking")


def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    logger.info("Order Tracking Backend on port %s (shop: %s)", settings.PORT, settings.SHOPIFY_DOMAIN)
    logger.info("API Endpoints:")
    for line in (
        "GET  /api/order/{orderNumber}",
        "POST /api/order/{orderNumber}/upload-payment",
        "POST /api/order/{orderNumber}/confirm-payment",
        "POST /api/order/{orderNumber}/cancel",
    ):
        logger.info("  - %s", line)

    uvicorn.run("order_tracking.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
