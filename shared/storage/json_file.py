"""File-backed storage adapter keeping all records in one JSON document."""

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path

from ..models import Chat, Message, User
from ..repository import Repositories
from .memory import InMemoryStore, create_memory_repositories

logger = logging.getLogger(__name__)

_FILE_PERMISSIONS = 0o600  # owner read/write only


class JsonFileStore(InMemoryStore):
    """
    InMemoryStore persisted to a single JSON file.

    Loads into memory on first access and writes the whole document back
    after every mutation. The asyncio.Lock inherited from InMemoryStore
    makes writes safe within one process.

    Limitation: only supports a single server instance. Multiple instances
    would overwrite each other's changes; use the redis or supabase backend
    for multi-instance deployments.
    """

    def __init__(self, file_path: str | Path) -> None:
        super().__init__()
        self._file_path = Path(file_path)

    def _load(self) -> None:
        """Load records from the JSON file.

        Starts empty when the file does not exist yet. Raises on read/parse
        failures for an existing file to prevent data loss from overwriting
        a file we could not read.
        """
        self.users, self.chats, self.messages = {}, {}, {}

        if not self._file_path.exists():
            return

        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError, OSError) as exc:
            msg = f"Failed to load store from {self._file_path}"
            raise OSError(msg) from exc

        if not isinstance(data, dict):
            msg = f"Expected JSON object at root in {self._file_path}"
            raise OSError(msg)

        try:
            self.users = {k: User.model_validate(v) for k, v in data.get("users", {}).items()}
            self.chats = {k: Chat.model_validate(v) for k, v in data.get("chats", {}).items()}
            self.messages = {
                k: Message.model_validate(v) for k, v in data.get("messages", {}).items()
            }
        except ValueError as exc:
            msg = f"Failed to parse records from {self._file_path}"
            raise OSError(msg) from exc

        logger.info(
            "Loaded %d users, %d chats, %d messages from %s",
            len(self.users),
            len(self.chats),
            len(self.messages),
            self._file_path,
        )

    def _save(self) -> None:
        """Atomically write all records to the JSON file.

        Writes to a temporary file in the same directory, then renames it
        into place so readers never see a truncated file. The file holds
        password hashes, so it is readable by the owner only.
        """
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "users": {k: v.model_dump(mode="json") for k, v in self.users.items()},
            "chats": {k: v.model_dump(mode="json") for k, v in self.chats.items()},
            "messages": {k: v.model_dump(mode="json") for k, v in self.messages.items()},
        }
        content = json.dumps(data, indent=2).encode("utf-8")

        fd, tmp_path = tempfile.mkstemp(
            dir=self._file_path.parent,
            prefix=".store_",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fchmod(f.fileno(), _FILE_PERMISSIONS)
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise


def create_json_repositories(file_path: str | Path) -> Repositories:
    """Build repositories persisted to file_path."""
    return create_memory_repositories(JsonFileStore(file_path))
