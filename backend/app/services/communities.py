"""
Community data access.

Covers communities, memberships, announcements and messages. Like
``TripService``, every public method returns a ``DbResult``.
"""

from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.db.result import db_operation
from backend.app.db.session import get_db
from backend.app.models.community import Announcement, Community, CommunityMember, Message
from backend.app.models.enums import MemberRole
from backend.app.schemas.community import CommunityCreate


class CommunityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Communities

    @db_operation("community.list")
    async def list_visible(self, user_id: str) -> List[Community]:
        """Public communities plus private ones the user created or joined."""
        membership = and_(
            CommunityMember.community_id == Community.id,
            CommunityMember.user_id == user_id,
        )
        result = await self.db.execute(
            select(Community)
            .outerjoin(CommunityMember, membership)
            .where(
                or_(
                    Community.is_private.is_(False),
                    Community.created_by == user_id,
                    CommunityMember.id.is_not(None),
                )
            )
            .order_by(Community.id)
        )
        return list(result.scalars().unique().all())

    @db_operation("community.create")
    async def create(self, user_id: str, payload: CommunityCreate) -> Community:
        """Create a community and enrol its creator as admin in one transaction."""
        community = Community(**payload.model_dump(), created_by=user_id)
        self.db.add(community)
        await self.db.flush()

        self.db.add(CommunityMember(
            community_id=community.id,
            user_id=user_id,
            role=MemberRole.ADMIN.value,
        ))
        await self.db.commit()
        await self.db.refresh(community)
        return community

    @db_operation("community.get")
    async def get(self, community_id: int, with_members: bool = False) -> Optional[Community]:
        query = select(Community).where(Community.id == community_id)
        if with_members:
            query = query.options(selectinload(Community.members))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    @db_operation("community.update")
    async def update_owned(self, community_id: int, user_id: str, fields: Dict[str, Any]) -> List[Community]:
        owned = (Community.id == community_id, Community.created_by == user_id)

        if not fields:
            result = await self.db.execute(select(Community).where(*owned))
            return list(result.scalars().all())

        result = await self.db.execute(
            update(Community).where(*owned).values(**fields).returning(Community)
        )
        communities = list(result.scalars().all())
        await self.db.commit()
        return communities

    @db_operation("community.delete")
    async def delete_owned(self, community_id: int, user_id: str) -> int:
        """Hard delete; memberships, announcements and messages go with it."""
        result = await self.db.execute(
            delete(Community).where(Community.id == community_id, Community.created_by == user_id)
        )
        await self.db.commit()
        return result.rowcount

    # Memberships

    @db_operation("member.list")
    async def list_members(self, community_id: int) -> List[CommunityMember]:
        result = await self.db.execute(
            select(CommunityMember)
            .where(CommunityMember.community_id == community_id)
            .order_by(CommunityMember.id)
        )
        return list(result.scalars().all())

    @db_operation("member.get")
    async def get_membership(self, community_id: int, user_id: str) -> Optional[CommunityMember]:
        result = await self.db.execute(
            select(CommunityMember).where(
                CommunityMember.community_id == community_id,
                CommunityMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    @db_operation("member.count_admins")
    async def count_admins(self, community_id: int) -> int:
        result = await self.db.execute(
            select(func.count(CommunityMember.id)).where(
                CommunityMember.community_id == community_id,
                CommunityMember.role == MemberRole.ADMIN.value,
            )
        )
        return result.scalar_one()

    @db_operation("member.add")
    async def add_member(self, community_id: int, user_id: str,
                         role: MemberRole = MemberRole.MEMBER) -> CommunityMember:
        member = CommunityMember(community_id=community_id, user_id=user_id, role=role.value)
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)
        return member

    @db_operation("member.remove")
    async def remove_member(self, community_id: int, user_id: str) -> int:
        result = await self.db.execute(
            delete(CommunityMember).where(
                CommunityMember.community_id == community_id,
                CommunityMember.user_id == user_id,
            )
        )
        await self.db.commit()
        return result.rowcount

    @db_operation("member.update_role")
    async def update_member_role(self, community_id: int, user_id: str, role: MemberRole) -> List[CommunityMember]:
        result = await self.db.execute(
            update(CommunityMember)
            .where(
                CommunityMember.community_id == community_id,
                CommunityMember.user_id == user_id,
            )
            .values(role=role.value)
            .returning(CommunityMember)
        )
        members = list(result.scalars().all())
        await self.db.commit()
        return members

    # Announcements

    @db_operation("announcement.list")
    async def list_announcements(self, community_id: int) -> List[Announcement]:
        result = await self.db.execute(
            select(Announcement)
            .where(Announcement.community_id == community_id)
            .order_by(Announcement.id.desc())
        )
        return list(result.scalars().all())

    @db_operation("announcement.create")
    async def create_announcement(self, community_id: int, user_id: str,
                                  content: str, trip_id: Optional[int] = None) -> Announcement:
        announcement = Announcement(
            community_id=community_id,
            trip_id=trip_id,
            created_by=user_id,
            content=content,
        )
        self.db.add(announcement)
        await self.db.commit()
        await self.db.refresh(announcement)
        return announcement

    # Messages

    @db_operation("message.list")
    async def list_messages(self, community_id: int) -> List[Message]:
        result = await self.db.execute(
            select(Message)
            .where(Message.community_id == community_id)
            .order_by(Message.id)
        )
        return list(result.scalars().all())

    @db_operation("message.create")
    async def create_message(self, community_id: int, sender_id: str,
                             content: str, trip_id: Optional[int] = None) -> Message:
        message = Message(
            community_id=community_id,
            trip_id=trip_id,
            sender_id=sender_id,
            content=content,
        )
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message


def get_community_service(db: AsyncSession = Depends(get_db)) -> CommunityService:
    """FastAPI dependency providing a CommunityService bound to the request session."""
    return CommunityService(db)
