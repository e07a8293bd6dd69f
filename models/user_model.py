from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class CurrentUser(BaseModel):
    """Identity resolved from a verified bearer token"""
    id: str
    email: Optional[str] = None


class ProfileIn(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


class ProfileOut(BaseModel):
    user_id: str
    username: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MeOut(BaseModel):
    id: str
    email: Optional[str] = None
    username: str


class ProfileSavedOut(BaseModel):
    message: str
    profile: ProfileOut


class MeResponse(BaseModel):
    user: MeOut
