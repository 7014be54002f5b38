"""Signup, login and logout"""

import logging
from typing import Optional

from fellowship.auth.identity import IdentityProvider
from fellowship.auth.jwt import create_access_token
from fellowship.config import Settings
from fellowship.services.database_service import Store
from fellowship.services.membership_service import MembershipService
from fellowship.services.request_service import RequestService

logger = logging.getLogger(__name__)


class AccountService:
    """Tie identity accounts to user profiles and session tokens"""

    def __init__(self, store: Store, identity: IdentityProvider, settings: Settings):
        self.store = store
        self.identity = identity
        self.settings = settings
        self.membership = MembershipService(store, settings, identity)

    def issue_token(self, user: dict) -> dict:
        token = create_access_token({"sub": user["id"], "email": user["email"]}, self.settings)
        return {"access_token": token, "token_type": "bearer", "user": user}

    def signup(
        self,
        email: str,
        password: str,
        display_name: str,
        phone_number: Optional[str] = None,
        family_id: Optional[str] = None,
        request_admin: bool = False
    ) -> dict:
        """Register a member and sign them in.

        ``request_admin`` files a pending admin request; it never grants the
        role directly.
        """
        with self.store.transaction():
            user_id = self.identity.create_account(email, password)
            user = self.membership.create_user_profile(
                user_id=user_id,
                email=email,
                display_name=display_name,
                phone_number=phone_number,
                family_id=family_id
            )
            if request_admin:
                RequestService(self.store).create_admin_request(user, reason="Requested at signup")

        logger.info(f"User signed up: {user_id}")
        return self.issue_token(user)

    def login(self, email: str, password: str) -> dict:
        user_id = self.identity.authenticate(email, password)
        user = self.membership.get_user(user_id)
        logger.info(f"User logged in: {user_id}")
        return self.issue_token(user)

    def logout(self, user_id: str):
        self.identity.sign_out(user_id)
