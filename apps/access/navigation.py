"""
Navigation descriptors and role-aware menu building.

The workspace menu mirrors the HR front end: a parent item is shown when the
resolver allows it, then each of its children is checked against the
sub-item table. A hidden parent hides all of its children.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from apps.access.principal import Principal
from apps.access.resolver import AccessControlResolver
from apps.access.roles import Role


@dataclass(frozen=True)
class NavItem:
    """A menu entry; `roles` optionally limits it to explicit roles."""
    id: str
    label: str
    path: str = ''
    roles: Optional[Tuple[Role, ...]] = None
    children: Tuple['NavItem', ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'label': self.label,
            'path': self.path,
        }
        if self.children:
            data['children'] = [child.to_dict() for child in self.children]
        return data


def _item(item_id, label, path, roles=None, children=()):
    return NavItem(id=item_id, label=label, path=path, roles=roles, children=tuple(children))


DEFAULT_NAVIGATION: Tuple[NavItem, ...] = (
    _item('dashboard', 'Dashboard', '/dashboard'),
    _item('attendance', 'Attendance', '/attendance', children=[
        _item('my-attendance', 'My Attendance', '/attendance/my-attendance'),
        _item('attendance-calendar', 'Calendar View', '/attendance/calendar'),
        _item('team-attendance', 'Team Attendance', '/attendance/team'),
    ]),
    _item('timesheet', 'Timesheet', '/timesheet', children=[
        _item('my-timesheet', 'My Timesheet', '/timesheet/my-timesheet'),
        _item('timesheet-approval', 'Approvals', '/timesheet/approval'),
    ]),
    _item('projects', 'Projects', '/projects'),
    _item('my-tasks', 'Tasks', '/tasks', children=[
        _item('my-task-list', 'My Tasks', '/tasks/my-tasks'),
        _item('project-tasks', 'Project Tasks', '/tasks/project-grid'),
        _item('kanban', 'Kanban Board', '/tasks/kanban'),
    ]),
    _item('leads', 'Leads', '/leads'),
    _item('employees', 'Employees', '/employees',
          roles=(Role.HR, Role.ADMIN, Role.MANAGER)),
    _item('skills', 'Skills', '/skills', children=[
        _item('my-skills', 'My Skills', '/skills/my-skills'),
        _item('skill-catalog', 'Skill Catalog', '/skills/catalog'),
        _item('skill-matrix', 'Skill Matrix', '/skills/matrix'),
        _item('team-structure', 'Team Structure', '/skills/team-structure'),
    ]),
    _item('leave', 'Leave', '/leave', children=[
        _item('my-leaves', 'My Leaves', '/leave/my-leaves'),
        _item('leave-approval', 'Leave Approval', '/leave/approval'),
        _item('leave-management', 'Leave Management', '/leave/management'),
    ]),
    _item('payroll', 'Payroll', '/payroll', children=[
        _item('my-payroll', 'My Payroll', '/payroll/my-payroll'),
        _item('payroll-processing', 'Payroll Processing', '/payroll/processing'),
        _item('payroll-approval', 'Payroll Approval', '/payroll/approval'),
    ]),
    _item('performance', 'Performance', '/performance', children=[
        _item('my-appraisals', 'My Appraisals', '/performance/my-appraisals'),
        _item('appraisal-management', 'Appraisal Management', '/performance/appraisals'),
    ]),
    _item('documents', 'Documents', '/documents', children=[
        _item('my-documents', 'My Documents', '/documents/mine'),
        _item('document-management', 'Document Management', '/documents/management'),
    ]),
    _item('reports', 'Reports', '/reports', children=[
        _item('attendance-report', 'Attendance Report', '/reports/attendance'),
        _item('timesheet-report', 'Timesheet Report', '/reports/timesheet'),
        _item('project-report', 'Project Report', '/reports/projects'),
        _item('lead-report', 'Lead Report', '/reports/leads'),
    ]),
    _item('settings', 'Settings', '/settings', children=[
        _item('personal-settings', 'Personal Settings', '/settings/personal'),
        _item('company-settings', 'Company Settings', '/settings/company'),
        _item('permissions-management', 'Permissions', '/settings/permissions'),
        _item('company-management', 'Companies', '/settings/companies'),
    ]),
)

PLATFORM_NAVIGATION: Tuple[NavItem, ...] = (
    _item('superadmin-dashboard', 'Dashboard', '/platform'),
    _item('superadmin-companies', 'Companies', '/platform/companies'),
    _item('superadmin-users', 'Users', '/platform/users'),
    _item('superadmin-analytics', 'Analytics', '/platform/analytics'),
    _item('superadmin-settings', 'Platform Settings', '/platform/settings'),
)


def build_navigation(resolver: AccessControlResolver, principal: Principal,
                     items: Iterable[NavItem] = DEFAULT_NAVIGATION) -> List[NavItem]:
    """
    Return the menu the principal may see.

    Children are only checked for parents that survived the top-level
    filter, so a sub-item rule can hide a child but never reveal one.
    """
    visible = []
    for item in resolver.filter_navigation_by_role(principal, items):
        children = tuple(
            child for child in item.children
            if resolver.can_access_sub_item(item.id, child.id, principal)
        )
        visible.append(replace(item, children=children))
    return visible


def build_platform_navigation(resolver: AccessControlResolver, principal: Principal) -> List[NavItem]:
    """Super-admin console menu; empty for everyone else."""
    if not resolver.can_access_platform_console(principal):
        return []
    return list(PLATFORM_NAVIGATION)


def find_nav_item(item_id: str, items: Iterable[NavItem] = DEFAULT_NAVIGATION) -> Optional[NavItem]:
    """Top-level item with the given id, or None."""
    for item in items:
        if item.id == item_id:
            return item
    return None
