"""
Document Store Models

Collection names and the enumerations stored on documents.
MongoDB is schemaless, so the shape of each document is described
by the request schemas in bistro.schemas.

Author: Khalil Bannouri
Version: 1.0.0
"""

import enum
from typing import Optional


class Collection(str, enum.Enum):
    """Collections inside the bistro database."""
    MENU = "menu"
    REVIEWS = "reviews"
    CARTS = "carts"
    USERS = "users"
    PAYMENTS = "payments"


class Role(str, enum.Enum):
    """
    Role stored on a user document.

    Ordinary users carry no role field at all; only "admin" is ever written.
    """
    ADMIN = "admin"


class Permission(str, enum.Enum):
    """Capabilities granted to a principal for the duration of a request."""
    MANAGE_MENU = "manage_menu"
    MANAGE_USERS = "manage_users"
    VIEW_REPORTS = "view_reports"


ROLE_PERMISSIONS: dict[str, frozenset[Permission]] = {
    Role.ADMIN.value: frozenset(Permission),
}


def permissions_for(role: Optional[str]) -> frozenset[Permission]:
    """Resolve the permission set for a stored role value."""
    if role is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(role, frozenset())
