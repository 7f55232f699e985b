"""
Access guards for ownership and community membership.

Ownership mismatches on trips and communities are not errors (the
``id AND created_by`` filter just matches nothing). The guards here cover
the community rules that do reject the caller.
"""

from typing import Iterable, Optional

from backend.app.core.exceptions import ConflictError, ForbiddenError, ResourceNotFoundError
from backend.app.models.community import Community, CommunityMember
from backend.app.models.enums import MemberRole
from backend.app.services.communities import CommunityService


def is_owner(resource_owner_id: Optional[str], current_user: dict) -> bool:
    """True when the caller is the resource's ``created_by``."""
    return resource_owner_id is not None and resource_owner_id == current_user.get("user_id")


def can_view(community: Community, membership: Optional[CommunityMember], current_user: dict) -> bool:
    """Public communities are visible to everyone, private ones to creator and members."""
    if not community.is_private:
        return True
    return is_owner(community.created_by, current_user) or membership is not None


class CommunityGuard:
    """
    Loads a community and checks the caller's standing in it.

    Usage:
        guard = CommunityGuard(service)
        community, membership = await guard.visible(community_id, current_user)
        await guard.require_role(community_id, current_user, [MemberRole.ADMIN])
    """

    def __init__(self, service: CommunityService):
        self.service = service

    async def visible(self, community_id: int, current_user: dict, with_members: bool = False):
        """
        Return ``(community, membership)`` or raise 404.

        A private community the caller cannot see is reported as missing.
        """
        community = (await self.service.get(community_id, with_members=with_members)).unwrap()
        if community is None:
            raise ResourceNotFoundError("Community", community_id)

        membership = (await self.service.get_membership(community_id, current_user["user_id"])).unwrap()
        if not can_view(community, membership, current_user):
            raise ResourceNotFoundError("Community", community_id)

        return community, membership

    async def require_member(self, community_id: int, current_user: dict) -> CommunityMember:
        """Return the caller's membership or raise 403."""
        _, membership = await self.visible(community_id, current_user)
        if membership is None:
            raise ForbiddenError("Community membership required")
        return membership

    async def require_role(self, community_id: int, current_user: dict,
                           allowed_roles: Iterable[MemberRole]) -> CommunityMember:
        """Return the caller's membership if its role is allowed, raise 403 otherwise."""
        membership = await self.require_member(community_id, current_user)
        allowed = {role.value for role in allowed_roles}
        if membership.role not in allowed:
            raise ForbiddenError(
                f"Access denied. Required role: {', '.join(sorted(allowed))}"
            )
        return membership

    async def keep_an_admin(self, community_id: int, user_id: str) -> None:
        """
        Raise 409 if ``user_id`` is the community's last admin.

        Called before that member is demoted or leaves; a community with no
        admin could never have its roles changed again.
        """
        membership = (await self.service.get_membership(community_id, user_id)).unwrap()
        if membership is None or membership.role != MemberRole.ADMIN.value:
            return
        if (await self.service.count_admins(community_id)).unwrap() <= 1:
            raise ConflictError("A community must keep at least one admin")
