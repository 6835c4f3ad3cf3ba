"""Receipt attachment storage."""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils import timezone

from .exceptions import ReceiptUploadError

logger = logging.getLogger(__name__)


def validate_receipt(upload) -> None:
    """
    Raises:
        ReceiptUploadError: If the file type or size is not accepted
    """
    if upload.content_type not in settings.RECEIPT_ALLOWED_CONTENT_TYPES:
        raise ReceiptUploadError(
            f"{upload.name}: unsupported file type {upload.content_type}; "
            f"allowed: {', '.join(settings.RECEIPT_ALLOWED_CONTENT_TYPES)}"
        )
    if upload.size > settings.RECEIPT_MAX_UPLOAD_BYTES:
        limit_mb = settings.RECEIPT_MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ReceiptUploadError(f"{upload.name}: file exceeds {limit_mb} MB")


def store_receipts(*, files, uploaded_by) -> list[str]:
    """
    Validate and store receipt files.

    All files are validated before any is written, so a rejected batch
    leaves nothing behind.

    Returns:
        Public URLs of the stored files, in upload order

    Raises:
        ReceiptUploadError: If no files were sent or any file is rejected
    """
    if not files:
        raise ReceiptUploadError("No files uploaded")

    for upload in files:
        validate_receipt(upload)

    folder = timezone.now().strftime('receipts/%Y/%m')
    urls = []
    for upload in files:
        extension = os.path.splitext(upload.name)[1].lower()
        name = default_storage.save(f"{folder}/{uuid.uuid4().hex}{extension}", upload)
        urls.append(default_storage.url(name))

    logger.info("%s uploaded %d receipt(s)", uploaded_by.email, len(urls))
    return urls
