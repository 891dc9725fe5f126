"""
Uploads module.

Accepts user file attachments, enforces the size and MIME type policy,
and stores them for public download.
"""

from .service import StoredUpload, UploadPolicy, UploadService, safe_basename
from .exceptions import FileTooLargeError, FileTypeNotAllowedError, NoFileUploadedError

__all__ = [
    "StoredUpload",
    "UploadPolicy",
    "UploadService",
    "safe_basename",
    "FileTooLargeError",
    "FileTypeNotAllowedError",
    "NoFileUploadedError",
]
