"""Authentication and authorization module"""

from fellowship.auth.identity import IdentityProvider
from fellowship.auth.jwt import create_access_token, verify_token, get_current_user

__all__ = [
    "IdentityProvider",
    "create_access_token",
    "verify_token",
    "get_current_user",
]
