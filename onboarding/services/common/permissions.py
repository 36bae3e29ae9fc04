# onboarding/services/common/permissions.py
"""
Role checks for the three onboarding actors.

Students act on their own profile, verification staff review documents
and hostel applications, administrators configure requirements and
finite resources (and may do anything staff can).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from onboarding.models.enums import UserRole

from .errors import AuthorizationError


class PermissionDenied(AuthorizationError):
    """Raised when a user lacks the required role."""

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> None:
        super().__init__(message, details={"role": role.value if role else None})
        self.user_id = user_id
        self.role = role


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated caller in the service layer.

    Attributes:
        user_id: Account identifier; for students this is also the profile owner key
        role: Caller's role
        metadata: Optional additional caller context
    """
    user_id: str
    role: UserRole
    metadata: dict = field(default_factory=dict)

    def has_role(self, role: UserRole) -> bool:
        return self.role == role

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return self.role in set(roles)


STAFF_ROLES = (UserRole.STAFF, UserRole.ADMIN)


def require_role(
    principal: Principal,
    allowed_roles: Iterable[UserRole],
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal has one of the allowed roles.

    Raises:
        PermissionDenied: If principal lacks required role

    Example:
        >>> require_role(principal, [UserRole.ADMIN])
    """
    allowed_roles = tuple(allowed_roles)
    if not principal.has_any_role(allowed_roles):
        roles_str = ", ".join(r.value for r in allowed_roles)
        msg = error_message or (
            f"User {principal.user_id} with role '{principal.role.value}' "
            f"does not have one of required roles: {roles_str}"
        )
        raise PermissionDenied(msg, user_id=principal.user_id, role=principal.role)


def require_student(principal: Principal) -> None:
    require_role(principal, [UserRole.STUDENT])


def require_staff(principal: Principal) -> None:
    require_role(principal, STAFF_ROLES)


def require_admin(principal: Principal) -> None:
    require_role(principal, [UserRole.ADMIN])
