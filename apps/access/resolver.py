"""
AccessControlResolver: the single place access decisions are made.

Inputs:
- principal: Principal (id, role, is_super_admin)
- a resource tag, an employee id, or a navigation (parent, child) pair

Rules:
- Pure functions of their inputs and the injected team directory
- No exceptions, no logging, no caching, no mutation
- Unknown roles match no role rule (fail closed); open resources stay open

Return:
- bool, or a filtered list for the list operations
"""
from typing import Iterable, List, Mapping, Optional, Sequence

from apps.access import policy
from apps.access.directory import StaticTeamDirectory, TeamDirectory
from apps.access.principal import Principal
from apps.access.roles import Role


def _item_attr(item, name, default=None):
    """Read a field from a nav descriptor (NavItem or plain mapping)."""
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


class AccessControlResolver:
    """
    Evaluate access rules for one principal at a time.

    A resolver is bound to a team directory snapshot and can be shared
    freely; it holds no per-call state.
    """

    def __init__(self, team_directory: Optional[TeamDirectory] = None,
                 sub_item_default_allow: bool = True):
        self.team_directory = team_directory if team_directory is not None else StaticTeamDirectory()
        self.sub_item_default_allow = sub_item_default_allow

    @classmethod
    def from_settings(cls, team_directory: Optional[TeamDirectory] = None) -> 'AccessControlResolver':
        """Build a resolver configured by settings.ACCESS_CONTROL."""
        from django.conf import settings

        config = getattr(settings, 'ACCESS_CONTROL', {}) or {}
        return cls(
            team_directory=team_directory,
            sub_item_default_allow=config.get('SUB_ITEM_DEFAULT_ALLOW', True),
        )

    # ------------------------------------------------------------------
    # Generic table lookup
    # ------------------------------------------------------------------

    def is_allowed(self, resource: str, user: Principal) -> bool:
        """Check a coarse resource tag against the authorization tables."""
        if resource in policy.OPEN_RESOURCES:
            return True
        allowed_roles = policy.RESOURCE_ROLES.get(resource)
        if not allowed_roles:
            return False
        return user.known_role in allowed_roles

    # ------------------------------------------------------------------
    # Team directory
    # ------------------------------------------------------------------

    def get_manager_team_members(self, manager_id: str) -> List[str]:
        return list(self.team_directory.get_reports(str(manager_id)))

    def is_direct_report(self, manager_id: str, employee_id: str) -> bool:
        return str(employee_id) in self.team_directory.get_reports(str(manager_id))

    def _manages(self, user: Principal, employee_id: str) -> bool:
        return user.has_role(Role.MANAGER) and self.is_direct_report(user.id, employee_id)

    # ------------------------------------------------------------------
    # Employee-scoped rules
    # ------------------------------------------------------------------

    def can_access_employee_details(self, user: Principal, employee_id: str) -> bool:
        if user.known_role in policy.EMPLOYEE_DETAILS_ROLES:
            return True
        if user.id == str(employee_id):
            return True
        return self._manages(user, employee_id)

    def can_access_employee_skills(self, user: Principal, employee_id: str) -> bool:
        return self.can_access_employee_details(user, employee_id)

    def can_edit_employee_skills(self, user: Principal, employee_id: str) -> bool:
        # Self only, admins included
        return user.id == str(employee_id)

    def can_approve_employee_skills(self, user: Principal, employee_id: str) -> bool:
        if user.known_role in policy.SKILL_APPROVAL_ROLES:
            return True
        return self._manages(user, employee_id)

    def get_accessible_employees(self, user: Principal, all_employee_ids: Sequence[str]) -> List[str]:
        """
        Return the employee ids the user may see.

        Admin and HR get the full list unchanged. A manager gets themself
        followed by their direct reports, and everyone else gets only
        themself. The manager and self branches do not intersect with
        `all_employee_ids`.
        """
        if user.known_role in policy.ALL_EMPLOYEES_ROLES:
            return list(all_employee_ids)
        if user.has_role(Role.MANAGER):
            return [user.id, *self.get_manager_team_members(user.id)]
        return [user.id]

    # ------------------------------------------------------------------
    # Coarse resources
    # ------------------------------------------------------------------

    def can_access_projects(self, user: Principal) -> bool:
        return self.is_allowed(policy.PROJECTS, user)

    def can_access_leads(self, user: Principal) -> bool:
        return self.is_allowed(policy.LEADS, user)

    def can_access_project(self, user: Principal, project_id: str) -> bool:
        # No per-project membership check; every project follows the projects rule
        return self.can_access_projects(user)

    def can_access_lead_details(self, user: Principal, lead_id: str) -> bool:
        return self.can_access_leads(user)

    def can_access_employee_directory(self, user: Principal) -> bool:
        return self.is_allowed(policy.EMPLOYEE_DIRECTORY, user)

    def can_access_skill_catalog(self, user: Principal) -> bool:
        return self.is_allowed(policy.SKILL_CATALOG, user)

    def can_edit_skill_catalog(self, user: Principal) -> bool:
        return self.is_allowed(policy.SKILL_CATALOG_EDIT, user)

    def can_access_skill_matrix(self, user: Principal) -> bool:
        return self.is_allowed(policy.SKILL_MATRIX, user)

    def can_access_team_structure(self, user: Principal) -> bool:
        return self.is_allowed(policy.TEAM_STRUCTURE, user)

    def can_access_reports(self, user: Principal) -> bool:
        return self.is_allowed(policy.REPORTS, user)

    def can_access_company_settings(self, user: Principal) -> bool:
        return self.is_allowed(policy.COMPANY_SETTINGS, user)

    def can_access_platform_console(self, user: Principal) -> bool:
        return bool(user.is_super_admin)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can_access_sub_item(self, parent_id: str, sub_item_id: str, user: Principal) -> bool:
        """
        Check the extra restriction on a navigation child.

        Only meaningful once the parent item is visible; this never grants
        access the parent does not have.
        """
        resource = policy.sub_item_resource(parent_id, sub_item_id)
        if resource is None:
            return self.sub_item_default_allow
        return self.is_allowed(resource, user)

    def can_access_nav_item(self, user: Principal, item) -> bool:
        """Top-level visibility of a single nav descriptor."""
        item_id = _item_attr(item, 'id')
        if item_id in policy.NAVIGATION_GATES and not self.is_allowed(item_id, user):
            return False
        roles = _item_attr(item, 'roles')
        if roles:
            allowed_roles = {Role.parse(role) for role in roles}
            return user.known_role is not None and user.known_role in allowed_roles
        return True

    def filter_navigation_by_role(self, user: Principal, nav_items: Iterable) -> list:
        return [item for item in nav_items if self.can_access_nav_item(user, item)]

    def decisions(self, user: Principal, resources: Iterable[str] = policy.SUMMARY_RESOURCES) -> dict:
        """Map each resource tag to the user's decision."""
        return {resource: self.is_allowed(resource, user) for resource in resources}
