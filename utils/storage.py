"""
Object storage for captured screenshots.

Screenshots live on the local filesystem under STORAGE_DIR and are served by
the API under /screenshots, so a stored path resolves to a fetchable URL.
"""

import logging
from pathlib import Path
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)


class LocalObjectStorage:
    """
    Filesystem-backed object storage addressed by relative paths
    such as "scans/<scan_id>/homepage.png".
    """

    def __init__(self, root: str, public_base_url: str = ""):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Storage path escapes the storage root: {path}")
        return target

    def save(self, path: str, data: bytes) -> str:
        """Persist bytes at path (overwriting) and return the path."""
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"💾 Stored {len(data)} bytes at {path}")
        return path

    def read(self, path: str) -> Optional[bytes]:
        """Return the stored bytes, or None if nothing is stored at path."""
        try:
            target = self._resolve(path)
        except ValueError as e:
            logger.warning(f"⚠️ Refusing to read {path}: {e}")
            return None
        if not target.is_file():
            return None
        return target.read_bytes()

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except ValueError:
            return False

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path.lstrip('/')}"


# Global storage instance
_storage: Optional[LocalObjectStorage] = None


def get_storage() -> LocalObjectStorage:
    """Get or create the global object storage instance."""
    global _storage
    if _storage is None:
        _storage = LocalObjectStorage(settings.STORAGE_DIR, settings.PUBLIC_BASE_URL)
    return _storage
