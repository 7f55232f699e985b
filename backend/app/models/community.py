"""
Community database models.

A community groups users around shared trips. Deleting a community removes
its memberships, announcements and messages through ON DELETE CASCADE.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import MemberRole


class Community(Base):
    """
    Community model.

    Private communities are only visible to their creator and members.
    """
    __tablename__ = "community"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)

    # Ownership
    created_by = Column(String(64), ForeignKey("auth_user.id"), nullable=True, index=True)

    is_private = Column(Boolean, default=False, nullable=False)
    rules = Column(Text, nullable=True)
    cover_image = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    members = relationship(
        "CommunityMember",
        back_populates="community",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Community(id={self.id}, name='{self.name}', private={self.is_private})>"


class CommunityMember(Base):
    """
    Membership of a user in a community.

    ``role`` is stored as text; the API only accepts MemberRole values.
    """
    __tablename__ = "community_member"
    __table_args__ = (
        UniqueConstraint("community_id", "user_id", name="uq_community_member"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    community_id = Column(Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id = Column(String(64), ForeignKey("auth_user.id", ondelete="CASCADE"), nullable=True, index=True)
    role = Column(String(20), default=MemberRole.MEMBER.value, nullable=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    community = relationship("Community", back_populates="members")

    def __repr__(self):
        return f"<CommunityMember(community_id={self.community_id}, user_id='{self.user_id}', role='{self.role}')>"


class Announcement(Base):
    """Announcement posted to a community, optionally about a trip."""
    __tablename__ = "announcement"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    community_id = Column(Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=True, index=True)
    trip_id = Column(Integer, ForeignKey("trip.id", ondelete="CASCADE"), nullable=True, index=True)
    created_by = Column(String(64), ForeignKey("auth_user.id", ondelete="CASCADE"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Announcement(id={self.id}, community_id={self.community_id})>"


class Message(Base):
    """
    Chat message in a community.

    The trip reference does not cascade: deleting a trip keeps its messages
    and clears the reference.
    """
    __tablename__ = "message"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    community_id = Column(Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=True, index=True)
    trip_id = Column(Integer, ForeignKey("trip.id", ondelete="SET NULL"), nullable=True)
    sender_id = Column(String(64), ForeignKey("auth_user.id"), nullable=True)
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Message(id={self.id}, community_id={self.community_id}, sender_id='{self.sender_id}')>"
