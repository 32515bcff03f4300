"""
Request Authorization Dependencies

Two chained gates, expressed as FastAPI dependencies:

    1. get_identity   - a valid bearer token must be present (401 otherwise)
    2. get_principal  - the user's role is looked up once and turned into a
                        permission set for the rest of the request

Routes then declare the capability they need with require_permission(),
which fails with 403 when the principal lacks it. The database handle and
the identity are passed in explicitly; nothing here holds shared state.

Usage:
    @router.get("/get-users")
    def list_users(
        principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
        db: Database = Depends(get_db),
    ): ...
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fastapi import Depends, Header
from pymongo.database import Database

from bistro.core.exceptions import ForbiddenError, UnauthorizedError
from bistro.core.security import TokenError, verify_token
from bistro.database import get_collection, get_db
from bistro.models import Collection, Permission, Role, permissions_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as asserted by a verified token."""
    email: str
    claims: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Principal:
    """An identity plus the permissions its stored role grants."""
    email: str
    role: Optional[str]
    permissions: frozenset[Permission]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def get_identity(
    authorization: Optional[str] = Header(default=None),
) -> Identity:
    """Gate 1: require a valid `Authorization: Bearer <token>` header."""
    if not authorization:
        raise UnauthorizedError()

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError()

    try:
        claims = verify_token(token)
    except TokenError as e:
        logger.info(f"Token rejected: {e}")
        raise UnauthorizedError() from e

    return Identity(email=claims["email"], claims=claims)


def get_principal(
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
) -> Principal:
    """
    Resolve the caller's role once per request.

    FastAPI caches dependency results per request, so every route and
    sub-dependency asking for the principal shares this single lookup.
    """
    user = get_collection(db, Collection.USERS).find_one(
        {"email": identity.email}, {"role": 1}
    )
    role = user.get("role") if user else None
    return Principal(
        email=identity.email,
        role=role,
        permissions=permissions_for(role),
    )


def require_permission(permission: Permission) -> Callable[..., Principal]:
    """Gate 2: build a dependency that demands a capability."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if permission not in principal.permissions:
            logger.info(
                f"Denied {permission.value} to {principal.email} (role={principal.role})"
            )
            raise ForbiddenError()
        return principal

    return dependency


def require_self(
    email: str,
    identity: Identity = Depends(get_identity),
) -> Identity:
    """Allow a route only for the user named by its `{email}` path parameter."""
    if email != identity.email:
        raise ForbiddenError()
    return identity
