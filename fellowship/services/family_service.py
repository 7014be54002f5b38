"""Family management and statistics"""

import logging
from typing import List, Optional

from fellowship.auth import permissions
from fellowship.errors import NotFoundError, ValidationFailedError
from fellowship.services.database_service import (
    ADMIN_REQUESTS,
    FAMILIES,
    FAMILY_REQUESTS,
    MEDIA,
    NOTIFICATIONS,
    POSTS,
    USERS,
    Store,
    timestamp,
)

logger = logging.getLogger(__name__)

FAMILY_FIELDS = ("name", "description", "image_url")

DEFAULT_FAMILIES = [
    {
        "id": "doxa-portal",
        "name": "Doxa Portal Family",
        "description": "A community dedicated to worship and spiritual growth through divine revelation and praise.",
        "image_url": "https://images.pexels.com/photos/8468470/pexels-photo-8468470.jpeg?auto=compress&cs=tinysrgb&w=800"
    },
    {
        "id": "rhema",
        "name": "Rhema Family",
        "description": "United by the spoken word of God, building faith through scripture and fellowship.",
        "image_url": "https://images.pexels.com/photos/1587927/pexels-photo-1587927.jpeg?auto=compress&cs=tinysrgb&w=800"
    },
    {
        "id": "glory",
        "name": "Glory Family",
        "description": "Reflecting God's glory in our daily lives and sharing His light with the world.",
        "image_url": "https://images.pexels.com/photos/1587927/pexels-photo-1587927.jpeg?auto=compress&cs=tinysrgb&w=800"
    },
    {
        "id": "grace",
        "name": "Grace Family",
        "description": "Living by grace through faith, extending God's love and mercy to all.",
        "image_url": "https://images.pexels.com/photos/8468470/pexels-photo-8468470.jpeg?auto=compress&cs=tinysrgb&w=800"
    },
    {
        "id": "hope",
        "name": "Hope Family",
        "description": "Anchored in hope, spreading encouragement and faith in our community.",
        "image_url": "https://images.pexels.com/photos/1587927/pexels-photo-1587927.jpeg?auto=compress&cs=tinysrgb&w=800"
    },
]


class FamilyService:
    """Create, update and inspect families"""

    def __init__(self, store: Store):
        self.store = store

    def list_families(self) -> List[dict]:
        return sorted(self.store.all(FAMILIES), key=lambda f: f.get("name", ""))

    def get_family(self, family_id: str) -> dict:
        family = self.store.get(FAMILIES, family_id)
        if not family:
            raise NotFoundError("Family", family_id)
        return family

    def insert_family(
        self,
        name: str,
        description: str = "",
        image_url: Optional[str] = None,
        family_id: Optional[str] = None
    ) -> dict:
        """Write a new family with an empty member count (no permission check)"""
        family = {
            "name": name,
            "description": description or "",
            "image_url": image_url,
            "member_count": 0,
            "created_at": timestamp()
        }
        if family_id:
            family["id"] = family_id
        family["id"] = self.store.create(FAMILIES, family)
        logger.info(f"Family created: {family['id']} ({name})")
        return family

    def create_family(
        self,
        actor: dict,
        name: str,
        description: str = "",
        image_url: Optional[str] = None
    ) -> dict:
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can create families")
        return self.insert_family(name, description, image_url)

    def update_family(self, actor: dict, family_id: str, updates: dict) -> dict:
        family = self.get_family(family_id)
        permissions.require(
            permissions.can_update_family(actor, family_id),
            "Insufficient permissions"
        )

        changes = {k: v for k, v in updates.items() if k in FAMILY_FIELDS}
        if not changes:
            raise ValidationFailedError("No updates provided")

        changes["updated_at"] = timestamp()
        self.store.update(FAMILIES, family_id, changes)
        return {**family, **changes}

    def delete_family(self, actor: dict, family_id: str):
        """Delete the family record only; members, posts and media are left in place"""
        family = self.get_family(family_id)
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can delete families")

        remaining = self.store.query(USERS, "family_id", family_id)
        if remaining:
            logger.warning(
                f"Deleting family {family_id} with {len(remaining)} members still assigned"
            )

        self.store.delete(FAMILIES, family_id)
        logger.info(f"Family deleted: {family_id} ({family['name']})")

    def seed_default_families(self) -> List[str]:
        """Create any missing default family. Existing families are left alone."""
        created = []
        for data in DEFAULT_FAMILIES:
            if self.store.get(FAMILIES, data["id"]):
                continue
            self.insert_family(
                data["name"],
                data["description"],
                data["image_url"],
                family_id=data["id"]
            )
            created.append(data["id"])

        if created:
            logger.info(f"Default families seeded: {', '.join(created)}")
        return created

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_family_stats(self, actor: dict, family_id: str) -> dict:
        self.get_family(family_id)
        permissions.require(
            permissions.can_view_family(actor, family_id),
            "Not a member of this family"
        )

        members = self.store.query(USERS, "family_id", family_id)
        notifications = self.store.query(NOTIFICATIONS, "family_id", family_id)
        return {
            "family_id": family_id,
            "member_count": len(members),
            "admin_count": len([m for m in members if m.get("role") == permissions.ADMIN]),
            "post_count": len(self.store.query(POSTS, "family_id", family_id)),
            "media_count": len(self.store.query(MEDIA, "family_id", family_id)),
            "notification_count": len(notifications),
            "unread_notification_count": len([n for n in notifications if not n.get("is_read")])
        }

    def recount_members(self, actor: dict, family_id: str) -> dict:
        """Reset ``member_count`` from the users collection"""
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can recount members")

        with self.store.transaction():
            family = self.get_family(family_id)
            actual = len(self.store.query(USERS, "family_id", family_id))
            if family.get("member_count") != actual:
                logger.warning(
                    f"Family {family_id} member_count drifted: {family.get('member_count')} -> {actual}"
                )
                self.store.update(FAMILIES, family_id, {"member_count": actual})

        return {**family, "member_count": actual}

    def get_overview_stats(self, actor: dict) -> dict:
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can view overview stats")
        return {
            "total_families": len(self.store.all(FAMILIES)),
            "total_users": len(self.store.all(USERS)),
            "total_posts": len(self.store.all(POSTS)),
            "pending_family_requests": len(self.store.query(FAMILY_REQUESTS, "status", "pending")),
            "pending_admin_requests": len(self.store.query(ADMIN_REQUESTS, "status", "pending"))
        }
