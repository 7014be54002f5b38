"""JWT session tokens"""

import logging
import time
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from fellowship.config import Settings
from fellowship.services.database_service import ACCOUNTS, USERS, Store

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()

# JWT Configuration
ALGORITHM = "HS256"


def create_access_token(
    data: dict,
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire, "iat": time.time()})
    encoded_jwt = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=ALGORITHM
    )
    return encoded_jwt


def verify_token(token: str, settings: Settings) -> Optional[dict]:
    """Verify and decode JWT token"""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM]
        )
        return payload
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def _signed_out_since(account: dict, issued_at: float) -> bool:
    signed_out_at = account.get("signed_out_at")
    if not signed_out_at:
        return False
    return datetime.fromisoformat(signed_out_at).timestamp() >= issued_at


def resolve_user(token: str, store: Store, settings: Settings) -> Optional[dict]:
    """Profile document for a valid, not signed-out token, else None"""
    payload = verify_token(token, settings)
    if payload is None:
        return None

    user_id: str = payload.get("sub")
    if user_id is None:
        return None

    account = store.get(ACCOUNTS, user_id)
    if account is None or _signed_out_since(account, float(payload.get("iat", 0))):
        return None

    return store.get(USERS, user_id)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> dict:
    """Get current user from JWT token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user = resolve_user(
        credentials.credentials,
        request.app.state.store,
        request.app.state.settings
    )
    if user is None:
        raise credentials_exception

    return user
