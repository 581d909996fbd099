import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from weekly_reminders.config import settings

logger = logging.getLogger(__name__)


@dataclass
class StoredBlob:
    key: str
    url: str


class LocalBlobStore:
    """
    File-system blob store with put/get/delete.

    Keys look like documents/<name>-<8 hex>.<ext>; the random suffix keeps
    uploads of the same filename apart.
    """

    def __init__(self, root: str = None):
        self.root = Path(root or settings.storage_dir)
        self.root.mkdir(parents=True, exist_ok=True)

    def put(self, content: bytes, name: str, mime_type: str) -> StoredBlob:
        path = Path(name.replace("/", "_"))
        suffix = uuid.uuid4().hex[:8]
        key = f"documents/{path.stem}-{suffix}{path.suffix}"

        target = self._path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info("Stored %s (%s, %d bytes)", key, mime_type, len(content))
        return StoredBlob(key=key, url=target.resolve().as_uri())

    def get(self, key: str) -> bytes:
        return self._path_for(key).read_bytes()

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()
            logger.info("Deleted %s", key)

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path
