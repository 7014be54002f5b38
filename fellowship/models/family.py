"""Family models"""

from typing import Optional

from pydantic import BaseModel, Field


class Family(BaseModel):
    id: str
    name: str
    description: str = ""
    image_url: Optional[str] = None
    member_count: int = 0
    created_at: str
    updated_at: Optional[str] = None


class FamilyCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=2000)
    image_url: Optional[str] = None


class FamilyUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    image_url: Optional[str] = None


class FamilyStats(BaseModel):
    family_id: str
    member_count: int
    admin_count: int
    post_count: int
    media_count: int
    notification_count: int
    unread_notification_count: int


class AdminLimitStatus(BaseModel):
    family_id: str
    admin_count: int
    max_admins: int
    can_add_admin: bool


class OverviewStats(BaseModel):
    total_families: int
    total_users: int
    total_posts: int
    pending_family_requests: int
    pending_admin_requests: int
