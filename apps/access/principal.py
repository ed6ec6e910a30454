"""
The actor whose access is evaluated.
"""
from dataclasses import dataclass
from typing import Optional, Union

from apps.access.roles import Role


@dataclass(frozen=True)
class Principal:
    """
    Immutable view of the current user inside one company.

    `id` is the user's id as a string (the same id space as the team
    directory). `role` keeps whatever the session supplied; unknown strings
    are preserved so they can fail closed instead of being coerced.
    """
    id: str
    role: Union[Role, str, None]
    is_super_admin: bool = False

    def __post_init__(self):
        if not isinstance(self.id, str):
            object.__setattr__(self, 'id', str(self.id))

    @property
    def known_role(self) -> Optional[Role]:
        return Role.parse(self.role)

    def has_role(self, *roles: Role) -> bool:
        return self.known_role in roles

    @classmethod
    def from_membership(cls, membership) -> 'Principal':
        """Build a principal from a CompanyMembership."""
        return cls(
            id=str(membership.user_id),
            role=membership.role,
            is_super_admin=bool(membership.user.is_superuser),
        )

    @classmethod
    def for_user(cls, user, role=None) -> 'Principal':
        """Build a principal for a user outside any company context."""
        return cls(
            id=str(user.pk),
            role=role,
            is_super_admin=bool(getattr(user, 'is_superuser', False)),
        )
