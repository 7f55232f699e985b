"""
Community schemas.

Request and response models for communities, memberships,
announcements and messages.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from backend.app.models.enums import MemberRole
from backend.app.schemas.base import CamelModel


class CommunityCreate(CamelModel):
    """Schema for creating a community."""
    name: str = Field(..., min_length=1, description="Community name")
    description: Optional[str] = None
    is_private: bool = False
    rules: Optional[str] = None
    cover_image: Optional[str] = None


class CommunityUpdate(CamelModel):
    """Schema for patching a community."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    is_private: Optional[bool] = None
    rules: Optional[str] = None
    cover_image: Optional[str] = None

    @field_validator("name", "is_private")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class CommunityMemberResponse(CamelModel):
    id: int
    community_id: int
    user_id: str
    role: MemberRole
    joined_at: datetime


class MemberRoleUpdate(CamelModel):
    """Schema for changing a member's role."""
    role: MemberRole


class CommunityResponse(CamelModel):
    """Schema for community response."""
    id: int
    name: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    is_private: bool
    rules: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CommunityDetailResponse(CommunityResponse):
    """Community together with its members."""
    members: List[CommunityMemberResponse] = []


class AnnouncementCreate(CamelModel):
    content: str = Field(..., min_length=1)
    trip_id: Optional[int] = None


class AnnouncementResponse(CamelModel):
    id: int
    community_id: Optional[int] = None
    trip_id: Optional[int] = None
    created_by: Optional[str] = None
    content: str
    created_at: datetime


class MessageCreate(CamelModel):
    content: str = Field(..., min_length=1)
    trip_id: Optional[int] = None


class MessageResponse(CamelModel):
    id: int
    community_id: Optional[int] = None
    trip_id: Optional[int] = None
    sender_id: Optional[str] = None
    content: str
    sent_at: datetime
