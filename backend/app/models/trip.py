"""
Trip database model.

Trips are created by a user, optionally inside a community, and carry
their start/end coordinates and route as JSON.
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonColumn = JSON().with_variant(JSONB(), "postgresql")


class Trip(Base):
    """
    Trip model.

    ``created_by`` is taken from the caller at creation and never changes;
    it is the ownership column for patch and delete.
    """
    __tablename__ = "trip"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    max_participants = Column(Integer, default=5, nullable=False)

    # {"lat": float, "lng": float}
    start_location = Column(JsonColumn, nullable=True)
    end_location = Column(JsonColumn, nullable=True)
    # [{"lat": float, "lng": float}, ...]
    route = Column(JsonColumn, nullable=True)

    community_id = Column(Integer, ForeignKey("community.id", ondelete="SET NULL"), nullable=True, index=True)

    # Ownership
    created_by = Column(String(64), ForeignKey("auth_user.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    participants = relationship(
        "TripParticipant",
        back_populates="trip",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Trip(id={self.id}, name='{self.name}', created_by='{self.created_by}')>"
