"""Family and admin request models"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

RequestStatus = Literal["pending", "approved", "rejected"]
ReviewDecision = Literal["approved", "rejected"]


class FamilyRequest(BaseModel):
    id: str
    requester_id: str
    requester_name: str
    family_name: str
    description: str = ""
    status: RequestStatus = "pending"
    family_id: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    created_at: str
    updated_at: str


class FamilyRequestCreate(BaseModel):
    family_name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=2000)


class FamilyRequestApprove(BaseModel):
    """Optional overrides for the family created on approval"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    image_url: Optional[str] = None


class AdminRequest(BaseModel):
    id: str
    user_id: str
    email: str
    display_name: str
    phone_number: Optional[str] = None
    status: RequestStatus = "pending"
    reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    created_at: str


class AdminRequestCreate(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class AdminRequestReview(BaseModel):
    decision: ReviewDecision
    reason: Optional[str] = Field(None, max_length=2000)
