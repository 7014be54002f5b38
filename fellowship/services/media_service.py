"""Family photo and audio library"""

import logging
import mimetypes
import re
from pathlib import Path
from typing import List, Optional

from fellowship.auth import permissions
from fellowship.errors import NotFoundError, ValidationFailedError
from fellowship.services.blob_service import BlobStore, BlobStoreError
from fellowship.services.database_service import FAMILIES, MEDIA, Store, generate_id, timestamp
from fellowship.services.notification_service import NotificationService, newest_first

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {
    "photo": {".jpg", ".jpeg", ".png", ".gif", ".webp"},
    "audio": {".mp3", ".wav", ".m4a", ".ogg", ".aac"},
}


def get_file_extension(filename: str) -> str:
    """Get file extension from filename"""
    return Path(filename).suffix.lower()


def safe_file_name(filename: str) -> str:
    name = Path(filename).name
    return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "file"


class MediaService:
    """Upload, list and delete family media"""

    def __init__(self, store: Store, blobs: BlobStore, max_upload_bytes: int):
        self.store = store
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes
        self.notifications = NotificationService(store)

    def get_media(self, media_id: str) -> dict:
        media = self.store.get(MEDIA, media_id)
        if not media:
            raise NotFoundError("Media", media_id)
        return media

    def validate_file(self, filename: str, content: bytes, type: str):
        if not filename:
            raise ValidationFailedError("No filename provided")

        allowed = ALLOWED_EXTENSIONS.get(type)
        if allowed is None:
            raise ValidationFailedError(f"Unknown media type: {type}")
        if get_file_extension(filename) not in allowed:
            raise ValidationFailedError(
                f"File type not allowed for {type}. Allowed: {', '.join(sorted(allowed))}"
            )

        if not content:
            raise ValidationFailedError("File is empty")
        if len(content) > self.max_upload_bytes:
            raise ValidationFailedError(
                f"File too large. Maximum size: {self.max_upload_bytes // (1024 * 1024)}MB"
            )

    def upload_media(
        self,
        actor: dict,
        family_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        type: str = "photo",
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> dict:
        if not self.store.get(FAMILIES, family_id):
            raise NotFoundError("Family", family_id)
        permissions.require(
            permissions.can_view_family(actor, family_id),
            "Only family members can upload media"
        )
        self.validate_file(filename, content, type)

        media_id = generate_id()
        file_path = f"families/{family_id}/media/{media_id}_{safe_file_name(filename)}"
        url = self.blobs.upload(content, file_path)

        media = {
            "id": media_id,
            "family_id": family_id,
            "type": type,
            "title": (title or "").strip() or Path(filename).stem,
            "description": description,
            "url": url,
            "download_url": url,
            "file_path": file_path,
            "file_name": filename,
            "size": len(content),
            "content_type": content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream",
            "uploaded_by": actor["id"],
            "uploaded_at": timestamp(),
            "tags": [t.strip() for t in (tags or []) if t and t.strip()]
        }

        try:
            with self.store.transaction():
                self.store.create(MEDIA, media)
                self.notifications.create_notification(
                    family_id=family_id,
                    title="New Media",
                    message=f"{actor.get('display_name') or 'Someone'} shared a new {type}: {media['title']}",
                    type="media",
                    created_by=actor["id"]
                )
        except Exception:
            self._remove_blob(file_path, media_id)
            raise

        logger.info(f"Media {media_id} ({type}) uploaded to family {family_id} by {actor['id']}")
        return media

    def list_family_media(self, actor: dict, family_id: str, type: Optional[str] = None) -> List[dict]:
        permissions.require(
            permissions.can_view_family(actor, family_id),
            "Not a member of this family"
        )
        filters = {"family_id": family_id}
        if type:
            filters["type"] = type
        return newest_first(self.store.query(MEDIA, **filters), key="uploaded_at")

    def delete_media(self, actor: dict, media_id: str):
        """Delete the record, then the blob.

        A blob that cannot be removed is logged and left behind.
        """
        media = self.get_media(media_id)
        permissions.require(
            permissions.can_delete_media(actor, media),
            "Insufficient permissions to delete this media"
        )

        self.store.delete(MEDIA, media_id)

        file_path = media.get("file_path")
        if file_path:
            self._remove_blob(file_path, media_id)

        logger.info(f"Media {media_id} deleted by {actor['id']}")

    def _remove_blob(self, file_path: str, media_id: str):
        try:
            self.blobs.delete(file_path)
        except BlobStoreError as e:
            logger.warning(f"Orphaned blob for media {media_id}: {e}")
