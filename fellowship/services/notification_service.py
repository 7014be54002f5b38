"""Family notifications

Notifications are addressed to a family, not to a person: every member of
the family sees the same document and the ``is_read`` flag is shared by all
of them.
"""

import logging
from typing import List, Optional

from fellowship.auth import permissions
from fellowship.errors import NotFoundError
from fellowship.services.database_service import FAMILIES, NOTIFICATIONS, Store, timestamp

logger = logging.getLogger(__name__)


def newest_first(docs: List[dict], key: str = "created_at") -> List[dict]:
    return sorted(docs, key=lambda x: x.get(key) or "", reverse=True)


class NotificationService:
    """Create, list and acknowledge family notifications"""

    def __init__(self, store: Store):
        self.store = store

    def create_notification(
        self,
        family_id: str,
        title: str,
        message: str,
        type: str = "general",
        created_by: Optional[str] = None
    ) -> dict:
        notification = {
            "family_id": family_id,
            "title": title,
            "message": message,
            "type": type,
            "is_read": False,
            "created_by": created_by,
            "created_at": timestamp()
        }
        notification["id"] = self.store.create(NOTIFICATIONS, notification)
        return notification

    def announce(self, actor: dict, family_id: str, title: str, message: str) -> dict:
        """Post an announcement to every member of a family"""
        if not self.store.get(FAMILIES, family_id):
            raise NotFoundError("Family", family_id)
        permissions.require(
            permissions.can_moderate_family(actor, family_id),
            "Only family admins can make announcements"
        )

        notification = self.create_notification(
            family_id=family_id,
            title=title.strip() or "Announcement",
            message=message.strip(),
            type="announcement",
            created_by=actor["id"]
        )
        logger.info(f"Announcement {notification['id']} sent to family {family_id} by {actor['id']}")
        return notification

    def list_family_notifications(self, actor: dict, family_id: str) -> List[dict]:
        permissions.require(
            permissions.can_view_family(actor, family_id),
            "Not a member of this family"
        )
        return newest_first(self.store.query(NOTIFICATIONS, "family_id", family_id))

    def get_notification(self, notification_id: str) -> dict:
        notification = self.store.get(NOTIFICATIONS, notification_id)
        if not notification:
            raise NotFoundError("Notification", notification_id)
        return notification

    def mark_notification_read(self, actor: dict, notification_id: str) -> dict:
        notification = self.get_notification(notification_id)
        permissions.require(
            permissions.can_view_family(actor, notification["family_id"]),
            "Not a member of this family"
        )

        self.store.update(NOTIFICATIONS, notification_id, {"is_read": True})
        return {**notification, "is_read": True}

    def delete_notification(self, actor: dict, notification_id: str):
        notification = self.get_notification(notification_id)
        permissions.require(
            permissions.can_moderate_family(actor, notification["family_id"]),
            "Only family admins can delete notifications"
        )

        self.store.delete(NOTIFICATIONS, notification_id)
        logger.info(f"Notification {notification_id} deleted by {actor['id']}")
