"""
File upload endpoint.

Mounted under /api, behind the session gate.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from api.dependencies import get_upload_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .exceptions import FileTooLargeError, NoFileUploadedError
from .service import StoredUpload, UploadService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=StoredUpload)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    user: AuthenticatedUser = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service),
) -> StoredUpload:
    """
    Store one file (multipart field "file") and return its public URL.
    """
    if file is None or not file.filename:
        logger.info("Rejected upload from user %s: no file", user.id)
        raise NoFileUploadedError()

    max_bytes = service.policy.max_bytes
    # at most max_bytes + 1 bytes are buffered
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        logger.info("Rejected upload from user %s: %s too large", user.id, file.filename)
        raise FileTooLargeError(max_bytes)

    return await service.save(file.filename, file.content_type, data)
