"""
Database seeding script for local development.

Creates two users, a public community and a trip, then prints a bearer
token for each user. Run after the database is reachable.
"""

import asyncio
from datetime import date

from sqlalchemy import select

from backend.app.core.jwt import create_access_token
from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.models.community import Community, CommunityMember
from backend.app.models.enums import MemberRole
from backend.app.models.trip import Trip
from backend.app.models.trip_participant import TripParticipant
from backend.app.models.user import User

DEMO_USERS = [
    ("demo_organizer", "organizer@tripcircle.dev", "Demo Organizer"),
    ("demo_traveler", "traveler@tripcircle.dev", "Demo Traveler"),
]


async def seed_demo():
    """
    Seed demo data.

    Creates:
    - 2 users
    - 1 public community with both users as members
    - 1 trip in that community, with the traveler as participant
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting demo seeding...")

        result = await db.execute(select(User).where(User.id == DEMO_USERS[0][0]))
        if result.scalar_one_or_none():
            print("ℹ️  Demo data already exists, skipping seeding")
        else:
            for user_id, email, name in DEMO_USERS:
                db.add(User(id=user_id, email=email, name=name))
            await db.flush()

            organizer_id, traveler_id = DEMO_USERS[0][0], DEMO_USERS[1][0]

            community = Community(name="Weekend Hikers", description="Short trips near town", created_by=organizer_id)
            db.add(community)
            await db.flush()
            db.add(CommunityMember(community_id=community.id, user_id=organizer_id, role=MemberRole.ADMIN.value))
            db.add(CommunityMember(community_id=community.id, user_id=traveler_id, role=MemberRole.MEMBER.value))

            trip = Trip(
                name="Ridge Walk",
                description="Sunrise hike along the ridge",
                start_date=date(2026, 5, 2),
                max_participants=8,
                start_location={"lat": 46.0, "lng": 7.0},
                community_id=community.id,
                created_by=organizer_id,
            )
            db.add(trip)
            await db.flush()
            db.add(TripParticipant(trip_id=trip.id, user_id=traveler_id))

            await db.commit()
            print("✅ Created users, community 'Weekend Hikers' and trip 'Ridge Walk'")

    print("\nTokens:")
    for user_id, email, _ in DEMO_USERS:
        token = create_access_token(claims={"sub": email, "user_id": user_id})
        print(f"  - {user_id}: {token}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_demo())
