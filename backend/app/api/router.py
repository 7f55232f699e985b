"""
API Router.

Aggregates all API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.endpoints import auth, communities, trips

router = APIRouter()

router.include_router(auth.router)
router.include_router(trips.router)
router.include_router(communities.router)
