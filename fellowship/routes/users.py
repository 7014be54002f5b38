"""User routes"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_membership_service
from fellowship.models import User, UserUpdateRequest
from fellowship.services.membership_service import MembershipService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=User)
async def get_current_user_profile(
    current_user: dict = Depends(get_current_user)
):
    """Get current user's profile"""
    return current_user


@router.put("/me", response_model=User)
async def update_current_user_profile(
    updates: UserUpdateRequest,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Update current user's profile"""
    update_data = updates.model_dump(exclude_unset=True)
    return membership.update_user_profile(current_user, current_user["id"], update_data)


@router.get("", response_model=List[User])
async def list_users(
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """List every user (super-admin only)"""
    return membership.list_users(current_user)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Get a user profile (self, same family or super-admin)"""
    return membership.get_visible_user(current_user, user_id)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Delete a user and release their family seat (super-admin only)"""
    membership.delete_user(current_user, user_id)
    return {"message": "User deleted successfully"}


@router.post("/{user_id}/promote", response_model=User)
async def promote_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Make a member an admin"""
    return membership.promote(current_user, user_id)


@router.post("/{user_id}/demote", response_model=User)
async def demote_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Return an admin to member"""
    return membership.demote(current_user, user_id)
