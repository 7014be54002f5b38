"""First-run setup

A single ``config/church`` document marks the deployment as initialized.
Until it exists the API only serves the setup routes.
"""

import logging
from typing import Optional

from fellowship.auth import permissions
from fellowship.auth.identity import IdentityProvider
from fellowship.config import Settings
from fellowship.errors import AlreadyInitializedError
from fellowship.services.database_service import CONFIG, Store, timestamp
from fellowship.services.family_service import FamilyService
from fellowship.services.membership_service import MembershipService

logger = logging.getLogger(__name__)

SETUP_DOCUMENT = "church"


class SetupService:
    """Initialize a fresh deployment"""

    def __init__(self, store: Store, identity: IdentityProvider, settings: Settings):
        self.store = store
        self.identity = identity
        self.settings = settings

    def get_marker(self) -> Optional[dict]:
        return self.store.get(CONFIG, SETUP_DOCUMENT)

    def is_initialized(self) -> bool:
        marker = self.get_marker()
        return bool(marker and marker.get("initialized"))

    def get_status(self) -> dict:
        marker = self.get_marker()
        return {
            "initialized": bool(marker and marker.get("initialized")),
            "church_name": marker.get("name") if marker else None
        }

    def initialize(
        self,
        church_name: str,
        email: str,
        password: str,
        display_name: str,
        phone_number: Optional[str] = None
    ) -> dict:
        """Create the super-admin and the setup marker.

        Returns the super-admin profile.
        """
        with self.store.transaction():
            if self.is_initialized():
                raise AlreadyInitializedError("The application has already been set up")

            user_id = self.identity.create_account(email, password)
            self.store.upsert(CONFIG, SETUP_DOCUMENT, {
                "name": church_name,
                "super_admin_id": user_id,
                "initialized": True,
                "created_at": timestamp()
            }, merge=False)

            membership = MembershipService(self.store, self.settings, self.identity)
            profile = membership.create_user_profile(
                user_id=user_id,
                email=email,
                display_name=display_name,
                phone_number=phone_number,
                role=permissions.SUPER_ADMIN
            )

            if self.settings.seed_default_families:
                FamilyService(self.store).seed_default_families()

        logger.info(f"Setup complete for '{church_name}'; super-admin {user_id}")
        return profile
