"""Family membership and roles

A user belongs to at most one family (``family_id``). Each family keeps a
denormalized ``member_count`` that is only ever changed by atomic increments
in the same transaction as the ``family_id`` write it accounts for, so the
counter and the user records move together or not at all.
"""

import logging
from typing import Optional

from fellowship.auth import permissions
from fellowship.config import Settings
from fellowship.errors import (
    AdminLimitReachedError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from fellowship.services.database_service import FAMILIES, USERS, Store, timestamp
from fellowship.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "phone_number")


class MembershipService:
    """Join, leave, promote, demote and delete users"""

    def __init__(self, store: Store, settings: Settings, identity=None):
        self.store = store
        self.settings = settings
        self.identity = identity
        self.notifications = NotificationService(store)

    # =========================================================================
    # Profiles
    # =========================================================================

    def get_user(self, user_id: str) -> dict:
        user = self.store.get(USERS, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def get_visible_user(self, actor: dict, user_id: str) -> dict:
        """A profile the actor may read: their own, a family-mate's, or any for the super-admin"""
        user = self.get_user(user_id)
        permissions.require(
            actor["id"] == user_id or permissions.can_view_family(actor, user.get("family_id")),
            "You can only view members of your own family"
        )
        return user

    def list_users(self, actor: dict) -> list:
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can list all users")
        return sorted(self.store.all(USERS), key=lambda u: u.get("created_at") or "")

    def get_users_by_family(self, actor: dict, family_id: str) -> list:
        permissions.require(
            permissions.can_view_family(actor, family_id),
            "Not a member of this family"
        )
        return self.store.query(USERS, "family_id", family_id)

    def create_user_profile(
        self,
        user_id: str,
        email: str,
        display_name: str,
        phone_number: Optional[str] = None,
        family_id: Optional[str] = None,
        role: str = permissions.MEMBER
    ) -> dict:
        """Create the profile for a freshly registered identity"""
        profile = {
            "id": user_id,
            "email": email.lower(),
            "display_name": display_name,
            "role": role,
            "family_id": None,
            "phone_number": phone_number,
            "created_at": timestamp()
        }

        with self.store.transaction():
            self.store.upsert(USERS, user_id, profile, merge=True)
            if family_id:
                if not self.store.get(FAMILIES, family_id):
                    raise NotFoundError("Family", family_id)
                self._move(profile, family_id)

        logger.info(f"User profile created: {user_id} ({role})")
        return self.get_user(user_id)

    def update_user_profile(self, actor: dict, user_id: str, updates: dict) -> dict:
        """Edit display name / phone number.

        Posts keep the ``author_name`` they were created with.
        """
        permissions.require(
            actor["id"] == user_id or permissions.is_super_admin(actor),
            "You can only edit your own profile"
        )
        user = self.get_user(user_id)

        changes = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
        if not changes:
            raise ValidationFailedError("No updates provided")

        changes["updated_at"] = timestamp()
        self.store.update(USERS, user_id, changes)
        return {**user, **changes}

    # =========================================================================
    # Membership transfer
    # =========================================================================

    def count_admins(self, family_id: str, exclude_user_id: Optional[str] = None) -> int:
        admins = self.store.query(USERS, family_id=family_id, role=permissions.ADMIN)
        return len([a for a in admins if a["id"] != exclude_user_id])

    def check_admin_limit(
        self,
        family_id: str,
        max_admins: Optional[int] = None,
        exclude_user_id: Optional[str] = None
    ) -> bool:
        """True while the family has room for another admin"""
        limit = self.settings.max_family_admins if max_admins is None else max_admins
        return self.count_admins(family_id, exclude_user_id) < limit

    def admin_limit_status(self, family_id: str) -> dict:
        if not self.store.get(FAMILIES, family_id):
            raise NotFoundError("Family", family_id)
        admin_count = self.count_admins(family_id)
        return {
            "family_id": family_id,
            "admin_count": admin_count,
            "max_admins": self.settings.max_family_admins,
            "can_add_admin": admin_count < self.settings.max_family_admins
        }

    def join_family(self, actor: dict, user_id: str, family_id: str) -> dict:
        """Move a user into ``family_id``.

        Joining the family the user is already in changes nothing. An admin
        joining a family that already has ``max_family_admins`` admins is
        either let in with a warning and stored as a member
        (``admin_limit_mode == "warn"``) or refused (``"block"``).
        """
        permissions.require(
            permissions.can_assign_family(actor, user_id),
            "You can only change your own family"
        )
        user = self.get_user(user_id)
        if not self.store.get(FAMILIES, family_id):
            raise NotFoundError("Family", family_id)

        warning = None
        effective_role = user["role"]
        if user["role"] == permissions.ADMIN and (user.get("family_id") or None) != family_id:
            if not self.check_admin_limit(family_id, exclude_user_id=user_id):
                limit = self.settings.max_family_admins
                if self.settings.admin_limit_mode == "block":
                    raise AdminLimitReachedError(f"This family already has {limit} admins")
                warning = f"This family already has {limit} admins. You will join as a regular member."
                effective_role = permissions.MEMBER
                logger.warning(f"Admin limit reached in family {family_id}; {user_id} joins as member")

        changes = {"role": effective_role} if effective_role != user["role"] else None
        result = self._move(user, family_id, changes)
        result["warning"] = warning
        result["effective_role"] = effective_role
        return result

    def leave_family(self, actor: dict) -> dict:
        """The acting user leaves their current family"""
        return self._move(self.get_user(actor["id"]), None)

    def remove_member_from_family(self, actor: dict, user_id: str) -> dict:
        """Unassign a member; the family's count drops by one"""
        user = self.get_user(user_id)
        permissions.require(
            permissions.can_manage_member(actor, user),
            "Insufficient permissions to remove this member"
        )
        result = self._move(user, None)
        logger.info(f"User {user_id} removed from family {result['previous_family_id']} by {actor['id']}")
        return result

    def _move(self, user: dict, new_family_id: Optional[str], changes: Optional[dict] = None) -> dict:
        user_id = user["id"]
        prev_family_id = user.get("family_id") or None
        result = {
            "previous_family_id": prev_family_id,
            "family_id": new_family_id,
            "changed": prev_family_id != new_family_id,
            "warning": None,
            "effective_role": user.get("role", permissions.MEMBER)
        }
        if not result["changed"]:
            result["user"] = user
            return result

        with self.store.transaction():
            self.store.update(USERS, user_id, {
                "family_id": new_family_id,
                "updated_at": timestamp(),
                **(changes or {})
            })

            if prev_family_id:
                self._adjust_member_count(prev_family_id, -1)

            if new_family_id:
                self.store.increment_field(FAMILIES, new_family_id, "member_count", 1)
                self.notifications.create_notification(
                    family_id=new_family_id,
                    title="New Member",
                    message=f"{user.get('display_name') or user.get('email')} joined the family",
                    type="general",
                    created_by=user_id
                )

        logger.info(f"User {user_id} moved from family {prev_family_id} to {new_family_id}")
        result["user"] = self.get_user(user_id)
        return result

    def _adjust_member_count(self, family_id: str, delta: int):
        try:
            self.store.increment_field(FAMILIES, family_id, "member_count", delta)
        except NotFoundError:
            logger.warning(f"Family {family_id} no longer exists; member count not adjusted")

    # =========================================================================
    # Roles
    # =========================================================================

    def _set_role(self, actor: dict, user_id: str, role: str) -> dict:
        user = self.get_user(user_id)
        if actor["id"] == user_id:
            raise PermissionDeniedError("You cannot change your own role")
        permissions.require(
            permissions.can_manage_member(actor, user),
            "Insufficient permissions to change this user's role"
        )
        if user["role"] == permissions.SUPER_ADMIN:
            raise InvalidStateTransitionError("The super-admin role cannot be changed")

        if user["role"] == role:
            return user

        updated_at = timestamp()
        self.store.update(USERS, user_id, {"role": role, "updated_at": updated_at})
        logger.info(f"User {user_id} role changed {user['role']} -> {role} by {actor['id']}")
        return {**user, "role": role, "updated_at": updated_at}

    def promote(self, actor: dict, user_id: str) -> dict:
        return self._set_role(actor, user_id, permissions.ADMIN)

    def demote(self, actor: dict, user_id: str) -> dict:
        return self._set_role(actor, user_id, permissions.MEMBER)

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_user(self, actor: dict, user_id: str):
        """Delete a profile (and its identity account), releasing its family seat"""
        user = self.get_user(user_id)
        permissions.require(
            permissions.can_delete_user(actor, user),
            "Only the super-admin can delete users"
        )

        with self.store.transaction():
            self.store.delete(USERS, user_id)
            if user.get("family_id"):
                self._adjust_member_count(user["family_id"], -1)
            if self.identity is not None:
                self.identity.delete_account(user_id)

        logger.info(f"User {user_id} deleted by {actor['id']}")
