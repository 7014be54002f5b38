"""Authentication routes"""

import logging

from fastapi import APIRouter, Depends, status

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_account_service
from fellowship.models import LoginRequest, SignupRequest, TokenResponse
from fellowship.services.account_service import AccountService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    accounts: AccountService = Depends(get_account_service)
):
    """
    Register a new member.
    With ``request_admin`` set, a pending admin request is filed for review.
    """
    return accounts.signup(
        email=request.email,
        password=request.password,
        display_name=request.display_name,
        phone_number=request.phone_number,
        family_id=request.family_id,
        request_admin=request.request_admin
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    accounts: AccountService = Depends(get_account_service)
):
    """Exchange email and password for a session token"""
    return accounts.login(request.email, request.password)


@router.post("/logout")
async def logout(
    current_user: dict = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service)
):
    """Invalidate every token issued to the current user"""
    accounts.logout(current_user["id"])
    return {"message": "Logged out successfully"}
