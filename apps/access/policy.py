"""
Authorization tables.

Every role rule lives here as data. The resolver only looks things up.

Rules:
- A resource listed in OPEN_RESOURCES is allowed for every principal,
  including principals whose role is unknown.
- A resource listed in RESOURCE_ROLES is allowed only for the listed roles.
- A resource listed in neither table is denied.
- SUB_ITEM_RULES only narrows access to a navigation child whose parent was
  already allowed. Pairs missing from the table fall back to the
  ACCESS_CONTROL['SUB_ITEM_DEFAULT_ALLOW'] setting (allow by default).
"""
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

from apps.access.roles import ALL_ROLES, Role

# Resource tags
PROJECTS = 'projects'
LEADS = 'leads'
REPORTS = 'reports'
EMPLOYEE_DIRECTORY = 'employee-directory'
SKILL_CATALOG = 'skill-catalog'
SKILL_CATALOG_EDIT = 'skill-catalog:edit'
SKILL_MATRIX = 'skill-matrix'
TEAM_STRUCTURE = 'team-structure'
COMPANY_SETTINGS = 'company-settings'
PERMISSIONS_MANAGEMENT = 'permissions-management'
COMPANY_MANAGEMENT = 'company-management'
DOCUMENT_MANAGEMENT = 'document-management'
APPRAISAL_MANAGEMENT = 'appraisal-management'
LEAVE_APPROVAL = 'leave-approval'
LEAVE_MANAGEMENT = 'leave-management'
PAYROLL_PROCESSING = 'payroll-processing'
PAYROLL_APPROVAL = 'payroll-approval'

WILDCARD = '*'

OPEN_RESOURCES: FrozenSet[str] = frozenset({
    EMPLOYEE_DIRECTORY,
    SKILL_CATALOG,
})

RESOURCE_ROLES: Mapping[str, FrozenSet[Role]] = MappingProxyType({
    # HR is the only role kept out of project work
    PROJECTS: ALL_ROLES - {Role.HR},
    LEADS: frozenset({Role.ADMIN, Role.MANAGER}),
    REPORTS: frozenset({Role.HR, Role.MANAGER, Role.ADMIN}),
    SKILL_CATALOG_EDIT: frozenset({Role.ADMIN, Role.HR}),
    SKILL_MATRIX: frozenset({Role.ADMIN, Role.HR, Role.MANAGER}),
    TEAM_STRUCTURE: frozenset({Role.ADMIN, Role.HR, Role.MANAGER}),
    COMPANY_SETTINGS: frozenset({Role.ADMIN}),
    PERMISSIONS_MANAGEMENT: frozenset({Role.ADMIN}),
    COMPANY_MANAGEMENT: frozenset({Role.ADMIN}),
    DOCUMENT_MANAGEMENT: frozenset({Role.HR, Role.ADMIN}),
    APPRAISAL_MANAGEMENT: frozenset({Role.HR, Role.ADMIN, Role.MANAGER}),
    LEAVE_APPROVAL: frozenset({Role.MANAGER, Role.ADMIN}),
    LEAVE_MANAGEMENT: frozenset({Role.HR, Role.ADMIN}),
    PAYROLL_PROCESSING: frozenset({Role.FINANCE, Role.ACCOUNTS, Role.ADMIN}),
    PAYROLL_APPROVAL: frozenset({Role.ADMIN, Role.FINANCE}),
})

# Employee-scoped rules. Self access and manager-of-report access are
# resolved against the team directory on top of these role grants.
EMPLOYEE_DETAILS_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN, Role.HR})
SKILL_APPROVAL_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN})
ALL_EMPLOYEES_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN, Role.HR})

# (parent nav id, child nav id) -> resource tag the child additionally requires
SUB_ITEM_RULES: Mapping[Tuple[str, str], str] = MappingProxyType({
    ('skills', 'skill-matrix'): SKILL_MATRIX,
    ('skills', 'team-structure'): TEAM_STRUCTURE,
    ('my-tasks', WILDCARD): PROJECTS,
    ('reports', 'project-report'): PROJECTS,
    ('reports', 'lead-report'): PROJECTS,
    ('settings', 'company-settings'): COMPANY_SETTINGS,
    ('settings', 'permissions-management'): PERMISSIONS_MANAGEMENT,
    ('settings', 'company-management'): COMPANY_MANAGEMENT,
    ('documents', 'document-management'): DOCUMENT_MANAGEMENT,
    ('performance', 'appraisal-management'): APPRAISAL_MANAGEMENT,
    ('leave', 'leave-approval'): LEAVE_APPROVAL,
    ('leave', 'leave-management'): LEAVE_MANAGEMENT,
    ('payroll', 'payroll-processing'): PAYROLL_PROCESSING,
    ('payroll', 'payroll-approval'): PAYROLL_APPROVAL,
})

# Top-level navigation ids hidden when the matching resource is denied
NAVIGATION_GATES: FrozenSet[str] = frozenset({
    PROJECTS,
    LEADS,
    SKILL_MATRIX,
    TEAM_STRUCTURE,
    REPORTS,
    COMPANY_SETTINGS,
})

# Coarse resources reported by the access summary endpoint
SUMMARY_RESOURCES: Tuple[str, ...] = (
    PROJECTS,
    LEADS,
    REPORTS,
    EMPLOYEE_DIRECTORY,
    SKILL_CATALOG,
    SKILL_CATALOG_EDIT,
    SKILL_MATRIX,
    TEAM_STRUCTURE,
    COMPANY_SETTINGS,
)


def known_resources() -> FrozenSet[str]:
    """All resource tags that have a rule."""
    return OPEN_RESOURCES | frozenset(RESOURCE_ROLES)


def sub_item_resource(parent_id: str, sub_item_id: str):
    """Return the resource a sub-item requires, or None when it has no rule."""
    resource = SUB_ITEM_RULES.get((parent_id, sub_item_id))
    if resource is None:
        resource = SUB_ITEM_RULES.get((parent_id, WILDCARD))
    return resource
