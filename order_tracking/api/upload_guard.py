# order_tracking/api/upload_guard.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from order_tracking.core import messages
from order_tracking.core.config import AppSettings
from order_tracking.services.payment_slip import SlipUpload

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "paymentSlip"


class UploadRejected(Exception):
    """The upload field failed the type / size gate; rendered as a 400."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


async def payment_slip_upload(request: Request) -> Optional[SlipUpload]:
    """
    Gate for the `paymentSlip` multipart field, resolved before the route body
    runs (so before any platform call).

    - no file          -> None (the route answers "no file uploaded"); a
                          plain text value under the field name is no file
    - type not allowed -> UploadRejected(UNSUPPORTED_FILE_TYPE)
    - over the limit   -> UploadRejected(FILE_TOO_LARGE)
    """
    body_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if body_type != "multipart/form-data":
        return None
    form = await request.form()
    payment_slip = form.get(UPLOAD_FIELD)
    if not isinstance(payment_slip, UploadFile):
        return None

    settings: AppSettings = request.app.state.settings
    content_type = (payment_slip.content_type or "").split(";")[0].strip().lower()
    if content_type not in settings.allowed_upload_types:
        logger.info("Rejected upload %r: type %r not allowed", payment_slip.filename, content_type)
        raise UploadRejected(messages.UNSUPPORTED_FILE_TYPE)

    # one byte past the limit marks oversize
    data = await payment_slip.read(settings.UPLOAD_MAX_BYTES + 1)
    await payment_slip.close()
    if len(data) > settings.UPLOAD_MAX_BYTES:
        logger.info("Rejected upload %r: larger than %s bytes", payment_slip.filename, settings.UPLOAD_MAX_BYTES)
        raise UploadRejected(messages.FILE_TOO_LARGE)

    return SlipUpload(
        filename=payment_slip.filename or "payment-slip",
        content_type=content_type,
        data=data,
    )
