"""Filesystem blob store

Stores uploaded bytes under ``uploads_dir`` and hands back a durable URL
served by the ``/uploads`` static mount.
"""

import logging
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Raised when a blob cannot be written or removed"""


class BlobStore:
    """Blob storage rooted at a local directory"""

    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise BlobStoreError(f"Invalid blob path: {path}")
        return self.root.joinpath(*relative.parts)

    def url_for(self, path: str) -> str:
        return f"{self.public_base_url}/uploads/{path}"

    def upload(self, content: bytes, path: str) -> str:
        """Store bytes at ``path`` and return their fetch URL"""
        file_path = self._resolve(path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise BlobStoreError(f"Failed to store {path}: {e}") from e

        logger.info(f"Blob stored: {path} ({len(content)} bytes)")
        return self.url_for(path)

    def delete(self, path: str):
        """Remove a stored blob; a blob that is already gone is not an error"""
        file_path = self._resolve(path)
        try:
            if file_path.exists():
                file_path.unlink()
        except OSError as e:
            raise BlobStoreError(f"Failed to delete {path}: {e}") from e

        logger.info(f"Blob deleted: {path}")

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()
