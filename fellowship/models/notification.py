"""Notification models"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

NotificationType = Literal["announcement", "media", "general"]


class Notification(BaseModel):
    id: str
    family_id: str
    title: str
    message: str
    type: NotificationType = "general"
    is_read: bool = False
    created_by: Optional[str] = None
    created_at: str


class AnnouncementRequest(BaseModel):
    title: str = Field("Announcement", max_length=200)
    message: str = Field("", max_length=5000)
