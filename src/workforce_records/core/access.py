"""Access scope policy shared by attendance, leave and payroll.

Visibility is "owner or admin/hr"; there are no per-record ACLs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError

PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.HR})


@dataclass(frozen=True)
class Caller:
    """Identity and role of whoever invokes an operation (trusted input)."""

    user_id: int
    role: Role


def can_see_all(role: Role) -> bool:
    return role in PRIVILEGED_ROLES


def can_act_on_others(role: Role) -> bool:
    return role in PRIVILEGED_ROLES


def scoped_user_id(caller: Caller, requested: Optional[int]) -> Optional[int]:
    """Return the user filter a list query must use.

    Non-privileged callers are always pinned to themselves, whatever they asked for.
    """

    if can_see_all(caller.role):
        return int(requested) if requested is not None else None
    return int(caller.user_id)


def require_can_act_on_others(caller: Caller) -> None:
    if not can_act_on_others(caller.role):
        raise AuthorizationError("Admin or HR role required")


def require_owner_or_privileged(caller: Caller, owner_id: int) -> None:
    if int(owner_id) != int(caller.user_id) and not can_see_all(caller.role):
        raise AuthorizationError("Not authorized to access this record")
