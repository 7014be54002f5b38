"""Family management and membership routes"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from fellowship.auth import permissions
from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_family_service, get_membership_service
from fellowship.errors import NotFoundError
from fellowship.models import (
    AdminLimitStatus,
    Family,
    FamilyCreateRequest,
    FamilyStats,
    FamilyUpdateRequest,
    JoinFamilyRequest,
    JoinResult,
    User,
)
from fellowship.services.family_service import FamilyService
from fellowship.services.membership_service import MembershipService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Family])
async def list_families(
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """List all families"""
    return families.list_families()


@router.post("", response_model=Family, status_code=status.HTTP_201_CREATED)
async def create_family(
    request: FamilyCreateRequest,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Create a family (super-admin only)"""
    return families.create_family(
        current_user,
        name=request.name,
        description=request.description,
        image_url=request.image_url
    )


@router.post("/leave", response_model=JoinResult)
async def leave_family(
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Leave the current family"""
    return membership.leave_family(current_user)


@router.get("/{family_id}", response_model=Family)
async def get_family(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Get family details"""
    return families.get_family(family_id)


@router.put("/{family_id}", response_model=Family)
async def update_family(
    family_id: str,
    updates: FamilyUpdateRequest,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Update family details (family admin or super-admin)"""
    return families.update_family(current_user, family_id, updates.model_dump(exclude_unset=True))


@router.delete("/{family_id}")
async def delete_family(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Delete a family record (super-admin only)"""
    families.delete_family(current_user, family_id)
    return {"message": "Family deleted successfully"}


@router.post("/{family_id}/join", response_model=JoinResult)
async def join_family(
    family_id: str,
    request: Optional[JoinFamilyRequest] = None,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """
    Join a family, leaving the current one.
    A super-admin may place another user by passing ``user_id``.
    """
    user_id = (request.user_id if request else None) or current_user["id"]
    return membership.join_family(current_user, user_id, family_id)


@router.get("/{family_id}/members", response_model=List[User])
async def list_members(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """List the members of a family"""
    return membership.get_users_by_family(current_user, family_id)


@router.delete("/{family_id}/members/{user_id}", response_model=JoinResult)
async def remove_member(
    family_id: str,
    user_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """Remove a member from the family (family admin or super-admin)"""
    user = membership.get_user(user_id)
    if user.get("family_id") != family_id:
        raise NotFoundError("Member", user_id)
    return membership.remove_member_from_family(current_user, user_id)


@router.get("/{family_id}/stats", response_model=FamilyStats)
async def family_stats(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Member, post, media and notification counts"""
    return families.get_family_stats(current_user, family_id)


@router.get("/{family_id}/admin-limit", response_model=AdminLimitStatus)
async def admin_limit(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    membership: MembershipService = Depends(get_membership_service)
):
    """How many admins the family has and whether another may join"""
    return membership.admin_limit_status(family_id)


@router.get("/{family_id}/permissions")
async def family_permissions(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """What the current user may do in this family"""
    families.get_family(family_id)
    return permissions.role_permissions(current_user, family_id)


@router.post("/{family_id}/recount", response_model=Family)
async def recount_members(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    families: FamilyService = Depends(get_family_service)
):
    """Recompute ``member_count`` from the users collection (super-admin only)"""
    return families.recount_members(current_user, family_id)
