"""
Trip schemas.

Request and response models for the /trip endpoints.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator

from backend.app.schemas.base import CamelModel, Coordinate


class TripCreate(CamelModel):
    """
    Schema for creating a trip.

    ``createdBy`` is never read from the body; unknown keys are ignored.
    """
    name: str = Field(..., description="Trip name")
    description: str = Field(..., description="Trip description")
    start_date: date = Field(..., description="First day of the trip (YYYY-MM-DD)")
    end_date: Optional[date] = None
    max_participants: Optional[int] = Field(None, ge=0, description="Defaults to 5 when missing or 0")
    start_location: Optional[Coordinate] = None
    end_location: Optional[Coordinate] = None
    route: Optional[List[Coordinate]] = None
    community_id: Optional[int] = None


class TripUpdate(CamelModel):
    """Schema for patching a trip. Only the keys present in the body are written."""
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_participants: Optional[int] = Field(None, ge=0)
    start_location: Optional[Coordinate] = None
    end_location: Optional[Coordinate] = None
    route: Optional[List[Coordinate]] = None
    community_id: Optional[int] = None

    @field_validator("name", "description", "start_date", "max_participants")
    @classmethod
    def reject_null(cls, value):
        # these columns are NOT NULL
        if value is None:
            raise ValueError("may not be null")
        return value


class TripParticipantResponse(CamelModel):
    """Schema for a trip participant."""
    id: int
    trip_id: int
    user_id: str
    joined_at: datetime


class TripResponse(CamelModel):
    """Schema for trip response."""
    id: int
    name: str
    description: str
    start_date: date
    end_date: Optional[date] = None
    max_participants: int
    start_location: Optional[Coordinate] = None
    end_location: Optional[Coordinate] = None
    route: Optional[List[Coordinate]] = None
    community_id: Optional[int] = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class TripDetailResponse(TripResponse):
    """Trip together with its participants."""
    participants: List[TripParticipantResponse] = []
