"""
Trip API Endpoints.

Authenticated CRUD over the caller's trips. Every route resolves the caller
first (401 envelope otherwise); patch and delete only touch rows whose
``created_by`` is the caller.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Response, status

from backend.app.core.dependencies import get_current_user
from backend.app.schemas.base import Envelope
from backend.app.schemas.trip import TripCreate, TripUpdate, TripResponse, TripDetailResponse
from backend.app.services.trips import TripService, get_trip_service

router = APIRouter(prefix="/trip", tags=["Trips"])


@router.get("", response_model=Envelope[List[TripResponse]])
async def list_my_trips(
    current_user: dict = Depends(get_current_user),
    trips: TripService = Depends(get_trip_service)
):
    """
    List all trips created by the caller.
    """
    found = (await trips.list_by_owner(current_user["user_id"])).unwrap()
    return Envelope(data=[TripResponse.model_validate(trip) for trip in found])


@router.post("", response_model=Envelope[List[TripResponse]], status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: dict = Depends(get_current_user),
    trips: TripService = Depends(get_trip_service)
):
    """
    Create a trip owned by the caller.

    ``createdBy`` always comes from the token. ``maxParticipants`` defaults
    to 5 and ``startLocation`` to (0, 0).
    """
    inserted = (await trips.create(current_user["user_id"], trip_data)).unwrap()
    return Envelope(data=[TripResponse.model_validate(trip) for trip in inserted])


@router.get("/{trip_id}", response_model=Envelope[Optional[TripDetailResponse]])
async def get_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(get_current_user),
    trips: TripService = Depends(get_trip_service)
):
    """
    Get a trip with its participants.

    A missing trip is not an error: the envelope carries ``data: null``.
    """
    trip = (await trips.get_with_participants(trip_id)).unwrap()
    data = TripDetailResponse.model_validate(trip) if trip is not None else None
    return Envelope(data=data)


@router.patch("/{trip_id}", response_model=Envelope[List[TripResponse]])
async def update_trip(
    trip_data: TripUpdate,
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(get_current_user),
    trips: TripService = Depends(get_trip_service)
):
    """
    Update the provided fields of a trip the caller owns.

    Patching someone else's trip matches no rows and returns ``data: []``.
    """
    fields = trip_data.model_dump(exclude_unset=True)
    updated = (await trips.update_owned(trip_id, current_user["user_id"], fields)).unwrap()
    return Envelope(data=[TripResponse.model_validate(trip) for trip in updated])


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(get_current_user),
    trips: TripService = Depends(get_trip_service)
):
    """
    Delete a trip the caller owns.

    Always 204; deleting someone else's trip removes nothing.
    """
    (await trips.delete_owned(trip_id, current_user["user_id"])).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
