"""
Trip data access.

``TripService`` wraps one request's ``AsyncSession``. Every public method
returns a ``DbResult``; mutations are filtered by ``id AND created_by`` so a
caller who does not own the trip simply matches zero rows.
"""

from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.core.config import settings
from backend.app.db.result import db_operation
from backend.app.db.session import get_db
from backend.app.models.trip import Trip
from backend.app.models.trip_participant import TripParticipant
from backend.app.schemas.trip import TripCreate

DEFAULT_START_LOCATION = {"lat": 0, "lng": 0}


class TripService:
    def __init__(self, db: AsyncSession):
        self.db = db

    @db_operation("trip.list")
    async def list_by_owner(self, user_id: str) -> List[Trip]:
        result = await self.db.execute(
            select(Trip).where(Trip.created_by == user_id).order_by(Trip.id)
        )
        return list(result.scalars().all())

    @db_operation("trip.create")
    async def create(self, user_id: str, payload: TripCreate) -> List[Trip]:
        """
        Insert one trip owned by ``user_id``.

        ``max_participants`` falls back to the configured default when it is
        missing or 0. ``start_location`` starts at (0, 0) and is replaced by
        the payload's value when one is given.

        Returns:
            A one-element list with the inserted row
        """
        data = payload.model_dump(exclude_none=True)
        max_participants = data.pop("max_participants", None)

        trip = Trip(**{
            "max_participants": max_participants or settings.default_max_participants,
            "start_location": dict(DEFAULT_START_LOCATION),
            **data,
            "created_by": user_id,
        })

        self.db.add(trip)
        await self.db.commit()
        await self.db.refresh(trip)
        return [trip]

    @db_operation("trip.get")
    async def get_with_participants(self, trip_id: int) -> Optional[Trip]:
        result = await self.db.execute(
            select(Trip)
            .where(Trip.id == trip_id)
            .options(
                selectinload(Trip.participants.and_(TripParticipant.trip_id == trip_id))
            )
        )
        return result.scalar_one_or_none()

    @db_operation("trip.update")
    async def update_owned(self, trip_id: int, user_id: str, fields: Dict[str, Any]) -> List[Trip]:
        """
        Write ``fields`` to the trip if ``user_id`` owns it.

        An empty ``fields`` dict writes nothing and returns the owned row as is.

        Returns:
            Updated rows (empty when the trip is missing or owned by someone else)
        """
        owned = (Trip.id == trip_id, Trip.created_by == user_id)

        if not fields:
            result = await self.db.execute(select(Trip).where(*owned))
            return list(result.scalars().all())

        result = await self.db.execute(
            update(Trip).where(*owned).values(**fields).returning(Trip)
        )
        trips = list(result.scalars().all())
        await self.db.commit()
        return trips

    @db_operation("trip.delete")
    async def delete_owned(self, trip_id: int, user_id: str) -> int:
        """Hard-delete the trip if ``user_id`` owns it. Returns the deleted row count."""
        result = await self.db.execute(
            delete(Trip).where(Trip.id == trip_id, Trip.created_by == user_id)
        )
        await self.db.commit()
        return result.rowcount


def get_trip_service(db: AsyncSession = Depends(get_db)) -> TripService:
    """FastAPI dependency providing a TripService bound to the request session."""
    return TripService(db)
