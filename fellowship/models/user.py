"""User models"""

from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Role = Literal["member", "admin", "super_admin"]


class User(BaseModel):
    id: str
    email: str
    display_name: str
    role: Role = "member"
    family_id: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    display_name: str = Field(..., min_length=1, max_length=120)
    phone_number: Optional[str] = Field(None, max_length=32)
    family_id: Optional[str] = None
    request_admin: bool = False


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


class UserUpdateRequest(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone_number: Optional[str] = Field(None, max_length=32)


class JoinFamilyRequest(BaseModel):
    # Only a super-admin may place someone other than themselves
    user_id: Optional[str] = None


class JoinResult(BaseModel):
    user: User
    previous_family_id: Optional[str] = None
    family_id: Optional[str] = None
    changed: bool
    warning: Optional[str] = None
    effective_role: Role
