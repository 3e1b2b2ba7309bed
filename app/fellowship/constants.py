"""
Central constants for the Fellowship Hub application.
"""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"
    SYSTEM_ADMIN = "system_admin"


class Permission(str, Enum):
    CREATE_USER = "create_user"
    DELETE_USER = "delete_user"
    MANAGE_CONTENT = "manage_content"
    CREATE_ANNOUNCEMENT = "create_announcement"
    DELETE_ANNOUNCEMENT = "delete_announcement"
    MANAGE_MEMBERS = "manage_members"


class MemberCategory(str, Enum):
    CHILDREN = "children"
    YOUTH = "youth"
    ADULT = "adult"


class GroupMemberStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


ROLE_VALUES = frozenset(r.value for r in Role)
PERMISSION_VALUES = frozenset(p.value for p in Permission)
MEMBER_CATEGORY_VALUES = frozenset(c.value for c in MemberCategory)
GROUP_MEMBER_STATUS_VALUES = frozenset(st.value for st in GroupMemberStatus)

# Flags given to the bootstrap system_admin account.
SEED_ADMIN_PERMISSIONS = (
    Permission.CREATE_USER.value,
    Permission.DELETE_USER.value,
    Permission.MANAGE_CONTENT.value,
)
