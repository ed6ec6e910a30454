"""
Workspace roles.

A member holds exactly one role per company. Role values are the lowercase
strings stored on CompanyMembership and sent by clients.
"""
from enum import Enum
from typing import FrozenSet, Optional


class Role(str, Enum):
    """Closed set of company roles."""
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    FINANCE = "finance"
    ACCOUNTS = "accounts"

    @classmethod
    def parse(cls, value) -> Optional['Role']:
        """
        Return the Role for a raw value, or None when it names no known role.

        Unknown values are not an error: callers treat them as matching no
        rule, which denies every gated resource.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def choices(cls):
        """(value, label) pairs for model and serializer fields."""
        return [(role.value, role.label) for role in cls]

    @property
    def label(self) -> str:
        if self is Role.HR:
            return 'HR'
        return self.value.capitalize()


ALL_ROLES: FrozenSet[Role] = frozenset(Role)
