"""
Upload storage.

Files are written to a local directory as "{epoch millis}-{basename}" and
exposed under a public URL prefix by the application's static mount.
Only the basename of the client-supplied name is kept, so a name such as
"../../etc/passwd" cannot escape the upload directory.
"""

import logging
import time
from pathlib import Path, PureWindowsPath
from typing import Callable, Optional

import anyio
from pydantic import BaseModel

from shared.config import Settings
from shared.models import APIModel

from .exceptions import FileTooLargeError, FileTypeNotAllowedError, NoFileUploadedError

logger = logging.getLogger(__name__)


class StoredUpload(APIModel):
    """Where an accepted upload ended up."""

    file_url: str
    file_name: str
    file_type: str
    file_size: int


class UploadPolicy(BaseModel):
    """Limits applied to every upload."""

    model_config = {"frozen": True}

    max_bytes: int = 10 * 1024 * 1024
    allowed_types: frozenset[str] = frozenset()


def safe_basename(filename: str) -> str:
    """Strip any directory part, POSIX or Windows style."""
    return PureWindowsPath(filename).name.strip()


def media_type(content_type: Optional[str]) -> str:
    """Bare lowercase MIME type, without parameters such as charset."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class UploadService:
    """Validates and stores uploaded files."""

    def __init__(
        self,
        upload_dir: Path,
        url_prefix: str,
        policy: UploadPolicy,
        clock: Callable[[], int] = _epoch_millis,
    ):
        self._upload_dir = Path(upload_dir)
        self._url_prefix = url_prefix.rstrip("/")
        self._policy = policy
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadService":
        return cls(
            upload_dir=Path(settings.upload_dir),
            url_prefix=settings.upload_url_prefix,
            policy=UploadPolicy(
                max_bytes=settings.upload_max_bytes,
                allowed_types=frozenset(t.lower() for t in settings.upload_allowed_types),
            ),
        )

    @property
    def policy(self) -> UploadPolicy:
        return self._policy

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> str:
        """
        Check an upload against the policy and return its safe basename.

        Raises:
            NoFileUploadedError: If there is no usable file name
            FileTooLargeError: If size exceeds the limit
            FileTypeNotAllowedError: If the MIME type is not allowed
        """
        name = safe_basename(filename or "")
        if not name or name in (".", ".."):
            raise NoFileUploadedError()
        if size > self._policy.max_bytes:
            raise FileTooLargeError(self._policy.max_bytes)
        if media_type(content_type) not in self._policy.allowed_types:
            raise FileTypeNotAllowedError(content_type)
        return name

    async def save(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> StoredUpload:
        """Validate and write an upload, returning its public location."""
        name = self.validate(filename, content_type, len(data))

        stored_name = f"{self._clock()}-{name}"
        path = self._upload_dir / stored_name
        await anyio.to_thread.run_sync(self._write, path, data)

        logger.info("Stored upload %s (%s, %d bytes)", stored_name, content_type, len(data))
        return StoredUpload(
            file_url=f"{self._url_prefix}/{stored_name}",
            file_name=name,
            file_type=media_type(content_type),
            file_size=len(data),
        )

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
