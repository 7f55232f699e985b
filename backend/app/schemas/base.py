"""
Shared Pydantic building blocks.

JSON bodies use camelCase keys (``startDate``, ``createdBy``) while the
Python side stays snake_case. Every response is wrapped in an ``Envelope``.
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model with camelCase aliases, readable from ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Coordinate(BaseModel):
    """A point on the map."""
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")


class ErrorBody(BaseModel):
    message: str
    code: Optional[str] = None
    details: Dict[str, Any] = {}


class Envelope(BaseModel, Generic[T]):
    """Uniform ``{data, error}`` response wrapper."""
    data: Optional[T] = None
    error: Optional[ErrorBody] = None
