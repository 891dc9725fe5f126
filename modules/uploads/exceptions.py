"""
Uploads module exceptions.
"""

from shared.exceptions import ValidationError


class NoFileUploadedError(ValidationError):
    """Raised when the multipart body has no file part."""

    def __init__(self):
        super().__init__("No file uploaded", code="NO_FILE")


class FileTooLargeError(ValidationError):
    """Raised when a file exceeds the upload size limit."""

    def __init__(self, max_bytes: int):
        super().__init__(
            f"File too large (max {max_bytes // (1024 * 1024)}MB)",
            code="FILE_TOO_LARGE",
            details={"max_bytes": max_bytes},
        )


class FileTypeNotAllowedError(ValidationError):
    """Raised when a file's MIME type is not on the allow-list."""

    def __init__(self, content_type: str | None):
        super().__init__(
            "File type not allowed",
            code="FILE_TYPE_NOT_ALLOWED",
            details={"content_type": content_type},
        )
