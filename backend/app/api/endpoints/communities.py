"""
Community API Endpoints.

Communities, their memberships, announcements and messages. Ownership of
the community itself follows the trip rules (``id AND created_by``);
membership rules are enforced by ``CommunityGuard``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Response, status

from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import ConflictError, ForbiddenError, ResourceNotFoundError
from backend.app.core.guards import CommunityGuard, can_view, is_owner
from backend.app.models.enums import MemberRole
from backend.app.schemas.base import Envelope
from backend.app.schemas.community import (
    AnnouncementCreate,
    AnnouncementResponse,
    CommunityCreate,
    CommunityDetailResponse,
    CommunityMemberResponse,
    CommunityResponse,
    CommunityUpdate,
    MemberRoleUpdate,
    MessageCreate,
    MessageResponse,
)
from backend.app.services.communities import CommunityService, get_community_service

router = APIRouter(prefix="/community", tags=["Communities"])


@router.get("", response_model=Envelope[List[CommunityResponse]])
async def list_communities(
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    List communities visible to the caller.

    Public communities plus private ones the caller created or joined.
    """
    found = (await communities.list_visible(current_user["user_id"])).unwrap()
    return Envelope(data=[CommunityResponse.model_validate(c) for c in found])


@router.post("", response_model=Envelope[CommunityResponse], status_code=status.HTTP_201_CREATED)
async def create_community(
    community_data: CommunityCreate,
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Create a community. The caller becomes its first admin member.
    """
    community = (await communities.create(current_user["user_id"], community_data)).unwrap()
    return Envelope(data=CommunityResponse.model_validate(community))


@router.get("/{community_id}", response_model=Envelope[Optional[CommunityDetailResponse]])
async def get_community(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Get a community with its members.

    Missing communities, and private ones the caller cannot see, yield
    ``data: null`` like a missing trip does.
    """
    community = (await communities.get(community_id, with_members=True)).unwrap()
    if community is None:
        return Envelope(data=None)

    membership = next(
        (m for m in community.members if m.user_id == current_user["user_id"]),
        None
    )
    if not can_view(community, membership, current_user):
        return Envelope(data=None)

    return Envelope(data=CommunityDetailResponse.model_validate(community))


@router.patch("/{community_id}", response_model=Envelope[List[CommunityResponse]])
async def update_community(
    community_data: CommunityUpdate,
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Update the provided fields of a community the caller created.
    """
    fields = community_data.model_dump(exclude_unset=True)
    updated = (await communities.update_owned(community_id, current_user["user_id"], fields)).unwrap()
    return Envelope(data=[CommunityResponse.model_validate(c) for c in updated])


@router.delete("/{community_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_community(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Delete a community the caller created, with its members, announcements
    and messages.
    """
    (await communities.delete_owned(community_id, current_user["user_id"])).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Memberships

@router.get("/{community_id}/members", response_model=Envelope[List[CommunityMemberResponse]])
async def list_members(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    await CommunityGuard(communities).visible(community_id, current_user)
    members = (await communities.list_members(community_id)).unwrap()
    return Envelope(data=[CommunityMemberResponse.model_validate(m) for m in members])


@router.post(
    "/{community_id}/members",
    response_model=Envelope[CommunityMemberResponse],
    status_code=status.HTTP_201_CREATED
)
async def join_community(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Join a community as a regular member.

    Private communities cannot be joined directly (403); their admins add
    members through ``POST /community/{id}/members/{user_id}``. Joining
    twice is 409.
    """
    community = (await communities.get(community_id)).unwrap()
    if community is None:
        raise ResourceNotFoundError("Community", community_id)
    if community.is_private and not is_owner(community.created_by, current_user):
        raise ForbiddenError("This community is private")

    existing = (await communities.get_membership(community_id, current_user["user_id"])).unwrap()
    if existing is not None:
        raise ConflictError("Already a member of this community")

    member = (await communities.add_member(community_id, current_user["user_id"])).unwrap()
    return Envelope(data=CommunityMemberResponse.model_validate(member))


@router.post(
    "/{community_id}/members/{user_id}",
    response_model=Envelope[CommunityMemberResponse],
    status_code=status.HTTP_201_CREATED
)
async def add_member(
    community_id: int = Path(..., description="Community ID"),
    user_id: str = Path(..., description="User ID to add"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Add a user as a regular member (community admins only).

    This is how private communities gain members. Adding an existing
    member is 409.
    """
    await CommunityGuard(communities).require_role(community_id, current_user, [MemberRole.ADMIN])

    existing = (await communities.get_membership(community_id, user_id)).unwrap()
    if existing is not None:
        raise ConflictError("Already a member of this community")

    member = (await communities.add_member(community_id, user_id)).unwrap()
    return Envelope(data=CommunityMemberResponse.model_validate(member))


@router.delete("/{community_id}/members/me", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def leave_community(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Leave a community. The last admin cannot leave (409).
    """
    await CommunityGuard(communities).keep_an_admin(community_id, current_user["user_id"])
    (await communities.remove_member(community_id, current_user["user_id"])).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{community_id}/members/{user_id}", response_model=Envelope[List[CommunityMemberResponse]])
async def change_member_role(
    role_data: MemberRoleUpdate,
    community_id: int = Path(..., description="Community ID"),
    user_id: str = Path(..., description="Member user ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Change a member's role (community admins only).

    Demoting the last admin is refused (409).
    """
    await CommunityGuard(communities).require_role(community_id, current_user, [MemberRole.ADMIN])
    if role_data.role != MemberRole.ADMIN:
        await CommunityGuard(communities).keep_an_admin(community_id, user_id)
    updated = (await communities.update_member_role(community_id, user_id, role_data.role)).unwrap()
    return Envelope(data=[CommunityMemberResponse.model_validate(m) for m in updated])


# Announcements

@router.get("/{community_id}/announcements", response_model=Envelope[List[AnnouncementResponse]])
async def list_announcements(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    await CommunityGuard(communities).visible(community_id, current_user)
    announcements = (await communities.list_announcements(community_id)).unwrap()
    return Envelope(data=[AnnouncementResponse.model_validate(a) for a in announcements])


@router.post(
    "/{community_id}/announcements",
    response_model=Envelope[AnnouncementResponse],
    status_code=status.HTTP_201_CREATED
)
async def post_announcement(
    announcement_data: AnnouncementCreate,
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    """
    Post an announcement (admins and moderators only).
    """
    await CommunityGuard(communities).require_role(
        community_id, current_user, [MemberRole.ADMIN, MemberRole.MODERATOR]
    )
    announcement = (await communities.create_announcement(
        community_id,
        current_user["user_id"],
        announcement_data.content,
        trip_id=announcement_data.trip_id
    )).unwrap()
    return Envelope(data=AnnouncementResponse.model_validate(announcement))


# Messages

@router.get("/{community_id}/messages", response_model=Envelope[List[MessageResponse]])
async def list_messages(
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    await CommunityGuard(communities).require_member(community_id, current_user)
    messages = (await communities.list_messages(community_id)).unwrap()
    return Envelope(data=[MessageResponse.model_validate(m) for m in messages])


@router.post(
    "/{community_id}/messages",
    response_model=Envelope[MessageResponse],
    status_code=status.HTTP_201_CREATED
)
async def send_message(
    message_data: MessageCreate,
    community_id: int = Path(..., description="Community ID"),
    current_user: dict = Depends(get_current_user),
    communities: CommunityService = Depends(get_community_service)
):
    await CommunityGuard(communities).require_member(community_id, current_user)
    message = (await communities.create_message(
        community_id,
        current_user["user_id"],
        message_data.content,
        trip_id=message_data.trip_id
    )).unwrap()
    return Envelope(data=MessageResponse.model_validate(message))
