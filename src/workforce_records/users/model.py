from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an employee reference resolved from the identity provider.

    Note: This core only reads users; identity and credentials are owned elsewhere.
    """

    user_id: int
    employee_code: str
    full_name: str
    role: Role
    email: Optional[str] = None
    is_active: bool = True
