# order_tracking/main.py
from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request

from order_tracking.api.cors import PermissiveCORSMiddleware
from order_tracking.api.routers.orders import router as orders_router
from order_tracking.api.routers.orders_schemas import ServiceInfoOut
from order_tracking.core.config import AppSettings, get_settings
from order_tracking.http_error_handlers import register_exception_handlers
from order_tracking.obs.metrics import PrometheusMiddleware
from order_tracking.obs.metrics import router as metrics_router

logger = logging.getLogger(__name__)

SERVICE_MESSAGE = "Order Tracking Backend API"


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    platform_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the service around one immutable settings object.

    `platform_transport` replaces the network transport of every outbound
    platform client (tests pass an httpx.MockTransport).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Order Tracking Backend",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.platform_transport = platform_transport

    # added last = outermost: CORS answers OPTIONS before anything else runs
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(PermissiveCORSMiddleware)

    register_exception_handlers(app)

    app.include_router(orders_router)
    app.include_router(metrics_router)

    @app.get("/", response_model=ServiceInfoOut)
    async def root(request: Request):
        return ServiceInfoOut(
            message=SERVICE_MESSAGE,
            version=request.app.state.settings.APP_VERSION,
        )

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    logger.info(
        "Order tracking app ready (shop=%s, status_policy=%s, slip_storage=%s)",
        settings.SHOPIFY_DOMAIN,
        settings.ORDER_STATUS_POLICY.value,
        settings.PAYMENT_SLIP_STORAGE,
    )
    return app


app = create_app()
