"""Family and admin request routes"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_request_service
from fellowship.models import (
    AdminRequest,
    AdminRequestCreate,
    AdminRequestReview,
    FamilyRequest,
    FamilyRequestApprove,
    FamilyRequestCreate,
    RequestStatus,
)
from fellowship.services.request_service import RequestService

logger = logging.getLogger(__name__)
router = APIRouter()


# Family requests
@router.get("/family-requests", response_model=List[FamilyRequest])
async def list_family_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status", description="Filter by status"),
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """List family requests (own requests unless super-admin)"""
    return requests.list_family_requests(current_user, status_filter)


@router.post("/family-requests", response_model=FamilyRequest, status_code=status.HTTP_201_CREATED)
async def create_family_request(
    request: FamilyRequestCreate,
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """Ask for a new family to be created"""
    return requests.create_family_request(current_user, request.family_name, request.description)


@router.post("/family-requests/{request_id}/approve", response_model=FamilyRequest)
async def approve_family_request(
    request_id: str,
    overrides: Optional[FamilyRequestApprove] = None,
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """
    Approve a pending request and create the family.
    Name, description and image may be overridden.
    """
    data = overrides.model_dump(exclude_unset=True) if overrides else None
    return requests.approve_family_request(current_user, request_id, data)


@router.post("/family-requests/{request_id}/reject", response_model=FamilyRequest)
async def reject_family_request(
    request_id: str,
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """Reject a pending request"""
    return requests.reject_family_request(current_user, request_id)


# Admin requests
@router.get("/admin-requests", response_model=List[AdminRequest])
async def list_admin_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status", description="Filter by status"),
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """List admin requests (own requests unless super-admin)"""
    return requests.list_admin_requests(current_user, status_filter)


@router.post("/admin-requests", response_model=AdminRequest, status_code=status.HTTP_201_CREATED)
async def create_admin_request(
    request: AdminRequestCreate,
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """Ask for admin access"""
    return requests.create_admin_request(current_user, request.reason)


@router.post("/admin-requests/{request_id}/review", response_model=AdminRequest)
async def review_admin_request(
    request_id: str,
    review: AdminRequestReview,
    current_user: dict = Depends(get_current_user),
    requests: RequestService = Depends(get_request_service)
):
    """Approve or reject a pending admin request (super-admin only)"""
    return requests.review_admin_request(current_user, request_id, review.decision, review.reason)
