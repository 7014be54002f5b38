"""Family-creation and admin-access requests

Both request kinds move ``pending -> approved`` or ``pending -> rejected``
and never leave a terminal state. Reviewing a request that is no longer
pending raises ``InvalidStateTransitionError``.
"""

import logging
from typing import List, Optional

from fellowship.auth import permissions
from fellowship.errors import (
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationFailedError,
)
from fellowship.services.database_service import (
    ADMIN_REQUESTS,
    FAMILY_REQUESTS,
    USERS,
    Store,
    timestamp,
)
from fellowship.services.family_service import FamilyService
from fellowship.services.notification_service import NotificationService, newest_first

logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"


def _require_pending(request: dict, kind: str):
    if request.get("status") != PENDING:
        raise InvalidStateTransitionError(
            f"{kind} '{request['id']}' was already {request.get('status')}"
        )


class RequestService:
    """Submit and review family and admin requests"""

    def __init__(self, store: Store):
        self.store = store
        self.families = FamilyService(store)
        self.notifications = NotificationService(store)

    # =========================================================================
    # Family requests
    # =========================================================================

    def get_family_request(self, request_id: str) -> dict:
        request = self.store.get(FAMILY_REQUESTS, request_id)
        if not request:
            raise NotFoundError("Family request", request_id)
        return request

    def create_family_request(self, actor: dict, family_name: str, description: str = "") -> dict:
        now = timestamp()
        request = {
            "requester_id": actor["id"],
            "requester_name": actor.get("display_name") or actor.get("email"),
            "family_name": family_name,
            "description": description or "",
            "status": PENDING,
            "family_id": None,
            "reviewed_by": None,
            "reviewed_at": None,
            "created_at": now,
            "updated_at": now
        }
        request["id"] = self.store.create(FAMILY_REQUESTS, request)
        logger.info(f"Family request {request['id']} ({family_name}) submitted by {actor['id']}")
        return request

    def list_family_requests(self, actor: dict, status: Optional[str] = None) -> List[dict]:
        """All requests for the super-admin; everyone else sees their own"""
        filters = {}
        if status:
            filters["status"] = status
        if not permissions.is_super_admin(actor):
            filters["requester_id"] = actor["id"]
        return newest_first(self.store.query(FAMILY_REQUESTS, **filters))

    def approve_family_request(self, actor: dict, request_id: str, overrides: Optional[dict] = None) -> dict:
        """Approve a pending request and create the family it asks for"""
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can review family requests")
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        with self.store.transaction():
            request = self.get_family_request(request_id)
            _require_pending(request, "Family request")

            family = self.families.insert_family(
                name=overrides.get("name") or request["family_name"],
                description=overrides.get("description", request.get("description", "")),
                image_url=overrides.get("image_url")
            )

            now = timestamp()
            changes = {
                "status": APPROVED,
                "family_id": family["id"],
                "reviewed_by": actor["id"],
                "reviewed_at": now,
                "updated_at": now
            }
            self.store.update(FAMILY_REQUESTS, request_id, changes)

            self.notifications.create_notification(
                family_id=family["id"],
                title="Family Approved",
                message=f"The {family['name']} family has been created. Welcome!",
                type="general",
                created_by=actor["id"]
            )

        logger.info(f"Family request {request_id} approved by {actor['id']}; family {family['id']} created")
        return {**request, **changes}

    def reject_family_request(self, actor: dict, request_id: str) -> dict:
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can review family requests")

        with self.store.transaction():
            request = self.get_family_request(request_id)
            _require_pending(request, "Family request")

            now = timestamp()
            changes = {
                "status": REJECTED,
                "reviewed_by": actor["id"],
                "reviewed_at": now,
                "updated_at": now
            }
            self.store.update(FAMILY_REQUESTS, request_id, changes)

        logger.info(f"Family request {request_id} rejected by {actor['id']}")
        return {**request, **changes}

    # =========================================================================
    # Admin requests
    # =========================================================================

    def get_admin_request(self, request_id: str) -> dict:
        request = self.store.get(ADMIN_REQUESTS, request_id)
        if not request:
            raise NotFoundError("Admin request", request_id)
        return request

    def create_admin_request(self, actor: dict, reason: Optional[str] = None) -> dict:
        if actor.get("role") in (permissions.ADMIN, permissions.SUPER_ADMIN):
            raise ConflictError("You already have admin access")

        with self.store.transaction():
            if self.store.query(ADMIN_REQUESTS, user_id=actor["id"], status=PENDING):
                raise ConflictError("You already have a pending admin request")

            request = {
                "user_id": actor["id"],
                "email": actor.get("email"),
                "display_name": actor.get("display_name"),
                "phone_number": actor.get("phone_number"),
                "status": PENDING,
                "reason": reason,
                "reviewed_by": None,
                "reviewed_at": None,
                "created_at": timestamp()
            }
            request["id"] = self.store.create(ADMIN_REQUESTS, request)

        logger.info(f"Admin request {request['id']} submitted by {actor['id']}")
        return request

    def list_admin_requests(self, actor: dict, status: Optional[str] = None) -> List[dict]:
        filters = {}
        if status:
            filters["status"] = status
        if not permissions.is_super_admin(actor):
            filters["user_id"] = actor["id"]
        return newest_first(self.store.query(ADMIN_REQUESTS, **filters))

    def review_admin_request(
        self,
        actor: dict,
        request_id: str,
        decision: str,
        reason: Optional[str] = None
    ) -> dict:
        """Record the decision; approval makes the requester an admin"""
        permissions.require(permissions.is_super_admin(actor), "Only the super-admin can review admin requests")
        if decision not in (APPROVED, REJECTED):
            raise ValidationFailedError(f"Unknown decision: {decision}")

        with self.store.transaction():
            request = self.get_admin_request(request_id)
            _require_pending(request, "Admin request")

            changes = {
                "status": decision,
                "reviewed_by": actor["id"],
                "reviewed_at": timestamp()
            }
            if reason is not None:
                changes["reason"] = reason
            self.store.update(ADMIN_REQUESTS, request_id, changes)

            if decision == APPROVED:
                user = self.store.get(USERS, request["user_id"])
                if not user:
                    raise NotFoundError("User", request["user_id"])
                if user.get("role") != permissions.SUPER_ADMIN:
                    self.store.update(USERS, user["id"], {
                        "role": permissions.ADMIN,
                        "updated_at": timestamp()
                    })

        logger.info(f"Admin request {request_id} {decision} by {actor['id']}")
        return {**request, **changes}
