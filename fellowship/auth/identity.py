"""Identity provider

Accounts (email + password hash) live in their own collection, apart from
the user profiles, so that the provider can be replaced by a hosted one
without touching profile data.
"""

import logging
from typing import Callable, Dict, Optional

from passlib.context import CryptContext

from fellowship.errors import ConflictError, InvalidCredentialsError, NotFoundError
from fellowship.services.database_service import ACCOUNTS, Store, generate_id, timestamp

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

AuthChangeCallback = Callable[[Optional[str]], None]


class IdentityProvider:
    """Issues stable user ids and checks credentials"""

    def __init__(self, store: Store):
        self.store = store
        self._listeners: Dict[str, AuthChangeCallback] = {}

    def get_account(self, user_id: str) -> Optional[dict]:
        return self.store.get(ACCOUNTS, user_id)

    def get_account_by_email(self, email: str) -> Optional[dict]:
        result = self.store.query(ACCOUNTS, "email", email.lower())
        return result[0] if result else None

    def create_account(self, email: str, password: str) -> str:
        """Register credentials and return the new user id"""
        email = email.lower()
        if self.get_account_by_email(email):
            raise ConflictError("An account with this email already exists")

        user_id = generate_id()
        self.store.create(ACCOUNTS, {
            "id": user_id,
            "email": email,
            "password_hash": pwd_context.hash(password),
            "created_at": timestamp(),
            "signed_out_at": None
        })
        logger.info(f"Account created: {user_id}")
        return user_id

    def authenticate(self, email: str, password: str) -> str:
        """Return the user id for valid credentials"""
        account = self.get_account_by_email(email)
        if not account or not pwd_context.verify(password, account["password_hash"]):
            raise InvalidCredentialsError("Invalid email or password")

        self.store.update(ACCOUNTS, account["id"], {"last_login_at": timestamp()})
        self._emit(account["id"])
        return account["id"]

    def sign_out(self, user_id: str):
        """Invalidate every session token issued to the user so far"""
        account = self.get_account(user_id)
        if not account:
            raise NotFoundError("Account", user_id)

        self.store.update(ACCOUNTS, user_id, {"signed_out_at": timestamp()})
        logger.info(f"User signed out: {user_id}")
        self._emit(None)

    def delete_account(self, user_id: str) -> bool:
        return self.store.delete(ACCOUNTS, user_id)

    def on_auth_change(self, callback: AuthChangeCallback) -> Callable[[], None]:
        """Call ``callback`` with a user id on sign-in and ``None`` on sign-out"""
        token = generate_id()
        self._listeners[token] = callback

        def unsubscribe():
            self._listeners.pop(token, None)

        return unsubscribe

    def _emit(self, user_id: Optional[str]):
        for callback in list(self._listeners.values()):
            try:
                callback(user_id)
            except Exception as e:
                logger.warning(f"Auth change listener failed: {e}", exc_info=True)
