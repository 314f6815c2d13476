# order_tracking/services/payment_slip.py
"""
Payment slip persistence against an order's `custom.payment_slip` metafield.

Two storage strategies, one per deployment (PAYMENT_SLIP_STORAGE):

  reference  upload the bytes to platform-managed Files (staged upload +
             fileCreate), keep only the file id (metafield type file_reference)
  inline     keep the whole file base64-encoded inside a JSON metafield

The store is chosen once from settings.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Protocol

from order_tracking.adapters.errors import PlatformError
from order_tracking.adapters.shopify_client import ShopifyClient
from order_tracking.core.config import SlipStorage
from order_tracking.services.order_lookup import PAYMENT_SLIP_KEY, upsert_order_metafield

logger = logging.getLogger(__name__)

STAGED_UPLOADS_CREATE = """
mutation generateStagedUploads($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters {
        name
        value
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

FILE_CREATE = """
mutation fileCreate($files: [FileCreateInput!]!) {
  fileCreate(files: $files) {
    files {
      id
      alt
      createdAt
      ... on MediaImage {
        image {
          url
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""


@dataclass(frozen=True)
class SlipUpload:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StoredSlip:
    metafield_type: str
    value: str
    uploaded_at: str  # UTC ISO-8601, generated when the slip is persisted


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class PaymentSlipStore(Protocol):
    async def save(self, client: ShopifyClient, order: Mapping[str, Any], upload: SlipUpload) -> StoredSlip:
        ...


class ReferenceSlipStore:
    """Staged upload -> object storage -> fileCreate -> file_reference metafield."""

    metafield_type = "file_reference"

    async def save(self, client: ShopifyClient, order: Mapping[str, Any], upload: SlipUpload) -> StoredSlip:
        logger.info("Uploading payment slip for %s to platform Files...", order.get("name"))

        # Step 1: staged upload target
        staged = ShopifyClient.mutation_result(
            await client.graphql(
                STAGED_UPLOADS_CREATE,
                {
                    "input": [
                        {
                            "resource": "FILE",
                            "filename": upload.filename,
                            "mimeType": upload.content_type,
                            "httpMethod": "POST",
                            "fileSize": str(upload.size),
                        }
                    ]
                },
            ),
            "stagedUploadsCreate",
        )
        targets = staged.get("stagedTargets") or []
        if not targets:
            raise PlatformError("stagedUploadsCreate returned no target")
        target = targets[0]
        logger.info("Staged upload URL: %s", target.get("url"))

        # Step 2: raw bytes to the target
        await client.upload_to_staged_target(
            target["url"],
            target.get("parameters"),
            filename=upload.filename,
            content_type=upload.content_type,
            data=upload.data,
        )

        # Step 3: register the uploaded object as a platform file
        created = ShopifyClient.mutation_result(
            await client.graphql(
                FILE_CREATE,
                {
                    "files": [
                        {
                            "alt": f"Payment slip for order {order.get('name')}",
                            "contentType": "IMAGE" if upload.content_type.startswith("image/") else "FILE",
                            "originalSource": target.get("resourceUrl"),
                        }
                    ]
                },
            ),
            "fileCreate",
        )
        files = created.get("files") or []
        if not files or not files[0].get("id"):
            raise PlatformError("fileCreate returned no file")
        file_id = files[0]["id"]
        logger.info("File created on platform: %s", file_id)

        return StoredSlip(metafield_type=self.metafield_type, value=file_id, uploaded_at=_utc_now_iso())


class InlineSlipStore:
    """The whole file as base64 inside a JSON metafield."""

    metafield_type = "json"

    async def save(self, client: ShopifyClient, order: Mapping[str, Any], upload: SlipUpload) -> StoredSlip:
        uploaded_at = _utc_now_iso()
        blob: Dict[str, Any] = {
            "filename": upload.filename,
            "mimeType": upload.content_type,
            "size": upload.size,
            "uploadedAt": uploaded_at,
            "data": base64.b64encode(upload.data).decode("ascii"),
        }
        return StoredSlip(
            metafield_type=self.metafield_type,
            value=json.dumps(blob, ensure_ascii=False),
            uploaded_at=uploaded_at,
        )


_STORES: Dict[str, PaymentSlipStore] = {
    "reference": ReferenceSlipStore(),
    "inline": InlineSlipStore(),
}


def get_slip_store(storage: SlipStorage) -> PaymentSlipStore:
    try:
        return _STORES[storage]
    except KeyError:
        raise ValueError(f"unknown payment slip storage: {storage!r}")


async def save_payment_slip(
    client: ShopifyClient,
    order: Mapping[str, Any],
    upload: SlipUpload,
    store: PaymentSlipStore,
) -> StoredSlip:
    """Persist the slip with `store`, then create or update the order metafield."""
    stored = await store.save(client, order, upload)
    await upsert_order_metafield(
        client,
        order["id"],
        key=PAYMENT_SLIP_KEY,
        value=stored.value,
        type_=stored.metafield_type,
    )
    logger.info("Payment slip stored on order %s (%s)", order.get("name"), stored.metafield_type)
    return stored
