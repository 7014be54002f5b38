"""Notification routes"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from fellowship.auth.jwt import get_current_user
from fellowship.dependencies import get_notification_service
from fellowship.models import AnnouncementRequest, Notification
from fellowship.services.notification_service import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/families/{family_id}/notifications", response_model=List[Notification])
async def list_notifications(
    family_id: str,
    current_user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    """List a family's notifications, newest first"""
    return notifications.list_family_notifications(current_user, family_id)


@router.post(
    "/families/{family_id}/notifications",
    response_model=Notification,
    status_code=status.HTTP_201_CREATED
)
async def announce(
    family_id: str,
    request: AnnouncementRequest,
    current_user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    """Send an announcement to the family (family admin or super-admin)"""
    return notifications.announce(current_user, family_id, request.title, request.message)


@router.post("/notifications/{notification_id}/read", response_model=Notification)
async def mark_read(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    """
    Mark a notification as read.
    The flag is shared by every member of the family.
    """
    return notifications.mark_notification_read(current_user, notification_id)


@router.delete("/notifications/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service)
):
    """Delete a notification (family admin or super-admin)"""
    notifications.delete_notification(current_user, notification_id)
    return {"message": "Notification deleted successfully"}
