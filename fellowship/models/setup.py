"""First-run setup models"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class SuperAdminSetup(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    display_name: str = Field(..., min_length=1, max_length=120)
    phone_number: Optional[str] = Field(None, max_length=32)


class SetupRequest(BaseModel):
    church_name: str = Field(..., min_length=1, max_length=200)
    super_admin: SuperAdminSetup


class SetupStatus(BaseModel):
    initialized: bool
    church_name: Optional[str] = None
