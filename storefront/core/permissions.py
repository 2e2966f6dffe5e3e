"""Role set and permission predicates.

Roles come from the backend `user_roles` table. Services never inspect
raw role strings; they ask `has_role` / `is_staff` on a typed set.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class AppRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CUSTOMER = "customer"


RoleSet = frozenset[AppRole]

STAFF_ROLES: RoleSet = frozenset({AppRole.ADMIN, AppRole.MANAGER})


class PermissionDeniedError(Exception):
    """Raised when the acting user lacks a required role."""


def role_set(values: Iterable[str | AppRole]) -> RoleSet:
    """Build a RoleSet from raw role values, ignoring unknown ones."""
    roles: set[AppRole] = set()
    for value in values:
        try:
            roles.add(AppRole(value))
        except ValueError:
            continue
    return frozenset(roles)


def has_role(roles: RoleSet, role: AppRole) -> bool:
    return role in roles


def is_admin(roles: RoleSet) -> bool:
    return has_role(roles, AppRole.ADMIN)


def is_staff(roles: RoleSet) -> bool:
    return any(has_role(roles, role) for role in STAFF_ROLES)


@dataclass(frozen=True)
class Actor:
    """Identity of whoever is calling a service."""

    user_id: str | None = None
    roles: RoleSet = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_staff(self) -> bool:
        return is_staff(self.roles)

    @classmethod
    def anonymous(cls) -> Actor:
        return cls()


def require_staff(actor: Actor) -> None:
    """Raise PermissionDeniedError unless the actor is admin or manager."""
    if not actor.is_staff:
        raise PermissionDeniedError("Staff role required")
