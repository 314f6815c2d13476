# tests/conftest.py
from __future__ import annotations

from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from order_tracking.core.config import DEFAULT_UPLOAD_TYPES, AppSettings
from order_tracking.domain.order_status import StatusPolicy
from order_tracking.main import create_app
from tests.factories import ACCESS_TOKEN, SHOP_DOMAIN
from tests.helpers.fake_platform import FakePlatform


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        SHOPIFY_DOMAIN=SHOP_DOMAIN,
        SHOPIFY_ACCESS_TOKEN=ACCESS_TOKEN,
        SHOPIFY_API_VERSION="2024-01",
        APP_VERSION="1.0.0",
        ORDER_STATUS_POLICY=StatusPolicy.METAFIELD,
        PAYMENT_SLIP_STORAGE="reference",
        UPLOAD_MAX_BYTES=10 * 1024 * 1024,
        UPLOAD_ALLOWED_TYPES=DEFAULT_UPLOAD_TYPES,
    )


@pytest.fixture
def make_client(fake_platform: FakePlatform, settings: AppSettings) -> Callable[..., AsyncClient]:
    """
    AsyncClient factory over the app; keyword args override settings fields.

    httpx no longer accepts AsyncClient(app=...); ASGITransport is explicit.
    """

    def _make(**overrides: Any) -> AsyncClient:
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        app = create_app(app_settings, platform_transport=httpx.MockTransport(fake_platform.handler))
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")

    return _make


@pytest_asyncio.fixture
async def client(make_client) -> AsyncGenerator[AsyncClient, None]:
    async with make_client() as c:
        yield c
