# order_tracking/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from order_tracking.domain.order_status import StatusPolicy

SlipStorage = Literal["reference", "inline"]

DEFAULT_UPLOAD_TYPES = "image/jpeg,image/png,image/jpg,image/webp,image/heic,image/heif"


class AppSettings(BaseSettings):
    """
    Service configuration, read once from the environment (and `.env`).

    Instances are frozen: build one at startup and pass it to `create_app`.
    """

    # Platform
    SHOPIFY_DOMAIN: str = Field(default="your-store.myshopify.com")
    SHOPIFY_ACCESS_TOKEN: str = Field(default="")
    SHOPIFY_API_VERSION: str = Field(default="2024-01")
    PLATFORM_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    APP_VERSION: str = Field(default="1.0.0")
    LOG_LEVEL: str = Field(default="INFO")

    # Business policies
    ORDER_STATUS_POLICY: StatusPolicy = Field(
        default=StatusPolicy.METAFIELD,
        description="metafield: staff-set fulfillment_stage wins; platform: fulfillment status + tags",
    )
    PAYMENT_SLIP_STORAGE: SlipStorage = Field(
        default="reference",
        description="reference: platform Files + file_reference metafield; inline: base64 JSON metafield",
    )

    # Upload limits (10MB, phone camera formats included)
    UPLOAD_MAX_BYTES: int = Field(default=10 * 1024 * 1024, gt=0)
    UPLOAD_ALLOWED_TYPES: str = Field(
        default=DEFAULT_UPLOAD_TYPES,
        description="comma separated MIME types, e.g. image/jpeg,image/png,application/pdf",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @property
    def allowed_upload_types(self) -> Tuple[str, ...]:
        return tuple(t.strip().lower() for t in self.UPLOAD_ALLOWED_TYPES.split(",") if t.strip())

    @property
    def platform_base_url(self) -> str:
        domain = self.SHOPIFY_DOMAIN.strip().rstrip("/")
        if "://" not in domain:
            domain = f"https://{domain}"
        return f"{domain}/admin/api/{self.SHOPIFY_API_VERSION}/"


@lru_cache
def get_settings() -> AppSettings:
    """Process-wide settings entry point."""
    return AppSettings()
