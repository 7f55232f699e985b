"""
Community membership roles.
"""

import enum


class MemberRole(str, enum.Enum):
    """
    Role of a user inside a community.

    Roles:
        ADMIN: Manages the community and its members
        MODERATOR: May post announcements
        MEMBER: Regular member (default)
    """
    ADMIN = "admin"
    MODERATOR = "moderator"
    MEMBER = "member"
