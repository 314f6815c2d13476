# order_tracking/api/routers/orders_routes.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from order_tracking.adapters.shopify_client import ShopifyClient
from order_tracking.api.deps import get_app_settings, get_platform_client
from order_tracking.api.routers.orders_schemas import (
    CancelIn,
    ErrorOut,
    MessageOut,
    OrderLookupOut,
    OrderViewOut,
    UploadedFileOut,
    UploadPaymentOut,
)
from order_tracking.api.upload_guard import UPLOAD_FIELD, payment_slip_upload
from order_tracking.core import messages
from order_tracking.core.config import AppSettings
from order_tracking.services.errors import BadRequest, OrderNotFound
from order_tracking.services.order_actions import cancel_order, confirm_payment
from order_tracking.services.order_lookup import find_order, list_order_metafields
from order_tracking.services.order_view import build_order_view
from order_tracking.services.payment_slip import SlipUpload, get_slip_store, save_payment_slip

logger = logging.getLogger(__name__)

_ERRORS = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
    500: {"model": ErrorOut},
}


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorOut(error=message).model_dump())


async def cancel_request(request: Request) -> Optional[CancelIn]:
    """
    Optional `{"reason": ...}` sent as JSON or as a urlencoded form.
    An empty body means no reason.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    try:
        if content_type == "application/x-www-form-urlencoded":
            form = await request.form()
            return CancelIn.model_validate(dict(form))

        raw = await request.body()
        if not raw.strip():
            return None
        return CancelIn.model_validate_json(raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


_UPLOAD_BODY_DOC = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {UPLOAD_FIELD: {"type": "string", "format": "binary"}},
                    "required": [UPLOAD_FIELD],
                }
            }
        },
    }
}

_CANCEL_BODY_DOC = {
    "requestBody": {
        "required": False,
        "content": {
            "application/json": {"schema": CancelIn.model_json_schema()},
            "application/x-www-form-urlencoded": {"schema": CancelIn.model_json_schema()},
        },
    }
}


def register(router: APIRouter) -> None:
    @router.get(
        "/{order_number}",
        response_model=OrderLookupOut,
        responses=_ERRORS,
        summary="Order details with derived status and cancellability",
    )
    async def get_order(
        order_number: str,
        client: ShopifyClient = Depends(get_platform_client),
        settings: AppSettings = Depends(get_app_settings),
    ):
        logger.info("--- Fetching Order --- %s", order_number)
        try:
            order = await find_order(client, order_number)
            metafields = await list_order_metafields(client, order["id"])
            view = build_order_view(order, metafields, policy=settings.ORDER_STATUS_POLICY)
            out = OrderLookupOut(order=OrderViewOut.model_validate(view))
        except OrderNotFound:
            logger.info("Order %s not found", order_number)
            return _fail(404, messages.ORDER_NOT_FOUND)
        except Exception:
            logger.exception("Error fetching order %s", order_number)
            return _fail(500, messages.FETCH_ORDER_FAILED)

        return out

    @router.post(
        "/{order_number}/upload-payment",
        response_model=UploadPaymentOut,
        responses=_ERRORS,
        summary="Attach a payment slip (multipart field `paymentSlip`) to the order",
        openapi_extra=_UPLOAD_BODY_DOC,
    )
    async def upload_payment(
        order_number: str,
        upload: Optional[SlipUpload] = Depends(payment_slip_upload),
        client: ShopifyClient = Depends(get_platform_client),
        settings: AppSettings = Depends(get_app_settings),
    ):
        logger.info("--- Upload Payment Slip --- %s", order_number)
        if upload is None:
            return _fail(400, messages.NO_FILE_UPLOADED)

        try:
            order = await find_order(client, order_number)
            stored = await save_payment_slip(
                client, order, upload, get_slip_store(settings.PAYMENT_SLIP_STORAGE)
            )
            out = UploadPaymentOut(
                message=messages.UPLOAD_SUCCEEDED,
                file=UploadedFileOut(name=upload.filename, size=upload.size, uploaded_at=stored.uploaded_at),
            )
        except OrderNotFound:
            logger.info("Order %s not found", order_number)
            return _fail(404, messages.ORDER_NOT_FOUND)
        except Exception:
            logger.exception("Error uploading payment slip for %s", order_number)
            return _fail(500, messages.UPLOAD_FAILED)

        logger.info("Payment slip uploaded for %s", order_number)
        return out

    @router.post(
        "/{order_number}/confirm-payment",
        response_model=MessageOut,
        responses=_ERRORS,
        summary="Tag the order payment-confirmed",
    )
    async def confirm_order_payment(
        order_number: str,
        client: ShopifyClient = Depends(get_platform_client),
    ):
        logger.info("--- Confirm Payment --- %s", order_number)
        try:
            order = await find_order(client, order_number)
            await confirm_payment(client, order)
        except OrderNotFound:
            return _fail(404, messages.ORDER_NOT_FOUND)
        except Exception:
            logger.exception("Error confirming payment for %s", order_number)
            return _fail(500, messages.CONFIRM_FAILED)

        return MessageOut(message=messages.CONFIRM_SUCCEEDED)

    @router.post(
        "/{order_number}/cancel",
        response_model=MessageOut,
        responses=_ERRORS,
        summary="Cancel the order (only within 3 days of creation)",
        openapi_extra=_CANCEL_BODY_DOC,
    )
    async def cancel(
        order_number: str,
        body: Optional[CancelIn] = Depends(cancel_request),
        client: ShopifyClient = Depends(get_platform_client),
    ):
        logger.info("--- Cancel Order --- %s", order_number)
        try:
            order = await find_order(client, order_number)
            await cancel_order(client, order, body.reason if body else None)
        except OrderNotFound:
            return _fail(404, messages.ORDER_NOT_FOUND)
        except BadRequest as exc:
            logger.info("Cancel refused for %s: %s", order_number, exc.reason)
            return _fail(400, exc.message)
        except Exception:
            logger.exception("Error cancelling order %s", order_number)
            return _fail(500, messages.CANCEL_FAILED)

        return MessageOut(message=messages.CANCEL_SUCCEEDED)
