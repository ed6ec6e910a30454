"""
Access API views (company-scoped).

All endpoints need the X-COMPANY-ID header; CompanyContextMiddleware
attaches request.principal and the company's team directory, and the
resolver answers from those alone.
"""
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.access import policy
from apps.access.navigation import build_navigation, build_platform_navigation, find_nav_item
from apps.access.serializers import (
    AccessCheckSerializer,
    AccessSummarySerializer,
    EmployeeAccessSerializer,
    NavItemSerializer,
)
from apps.companies.serializers import ReportingLineSerializer, UserSummarySerializer
from apps.companies.services import CompanyService
from apps.core.permissions import HasCompanyContext, HasResourceAccess, get_request_resolver, requires_resource

logger = logging.getLogger(__name__)


class CompanyScopedView(APIView):
    """Base class: authenticated member of the company in X-COMPANY-ID."""

    permission_classes = [IsAuthenticated, HasCompanyContext]


class AccessSummaryView(CompanyScopedView):
    """GET /v1/access/me"""

    @extend_schema(
        summary="Current principal and decisions",
        description="""
Return the caller's principal in the selected company (id, role, super-admin
flag) and the allow/deny decision for every coarse resource. Clients use the
decision map to show or hide features; the server enforces the same rules.
        """,
        responses={200: AccessSummarySerializer},
        tags=['Access Control']
    )
    def get(self, request):
        resolver = get_request_resolver(request)
        principal = request.principal

        payload = {
            'principal': principal,
            'company_id': str(request.company.id),
            'decisions': resolver.decisions(principal),
            'can_access_platform_console': resolver.can_access_platform_console(principal),
        }
        return Response(AccessSummarySerializer(payload).data)


class NavigationView(CompanyScopedView):
    """GET /v1/access/navigation"""

    @extend_schema(
        summary="Navigation menu",
        description="""
Return the workspace menu filtered for the caller. Parents are filtered by
role first; the children of each visible parent are then filtered by the
sub-item rules. Super admins additionally get the platform console menu.
        """,
        tags=['Access Control']
    )
    def get(self, request):
        resolver = get_request_resolver(request)
        principal = request.principal

        return Response({
            'items': NavItemSerializer(build_navigation(resolver, principal), many=True).data,
            'platform': NavItemSerializer(build_platform_navigation(resolver, principal), many=True).data,
        })


class AccessibleEmployeesView(CompanyScopedView):
    """GET /v1/access/employees"""

    permission_classes = [IsAuthenticated, HasResourceAccess]
    required_resources = [policy.EMPLOYEE_DIRECTORY]

    @extend_schema(
        summary="Employees visible to the caller",
        description="""
Admin and HR see every active member. Managers see themselves and their
direct reports; everyone else sees only themselves.
        """,
        tags=['Access Control']
    )
    def get(self, request):
        resolver = get_request_resolver(request)
        members = {
            str(membership.user_id): membership.user
            for membership in CompanyService.list_members(request.company)
        }

        employee_ids = resolver.get_accessible_employees(request.principal, list(members))
        employees = [members[employee_id] for employee_id in employee_ids if employee_id in members]

        return Response({
            'employee_ids': employee_ids,
            'employees': UserSummarySerializer(employees, many=True).data,
        })


class EmployeeAccessView(CompanyScopedView):
    """GET /v1/access/employees/{employee_id}"""

    @extend_schema(
        summary="Per-employee decisions",
        description="""
What the caller may do with one employee: view details, view skills, edit
skills (self only), approve skills, and whether the employee reports
directly to the caller.
        """,
        responses={200: EmployeeAccessSerializer},
        tags=['Access Control']
    )
    def get(self, request, employee_id):
        resolver = get_request_resolver(request)
        principal = request.principal

        payload = {
            'employee_id': employee_id,
            'details': resolver.can_access_employee_details(principal, employee_id),
            'skills': resolver.can_access_employee_skills(principal, employee_id),
            'edit_skills': resolver.can_edit_employee_skills(principal, employee_id),
            'approve_skills': resolver.can_approve_employee_skills(principal, employee_id),
            'direct_report': resolver.is_direct_report(principal.id, employee_id),
        }
        return Response(EmployeeAccessSerializer(payload).data)


class AccessCheckView(CompanyScopedView):
    """POST /v1/access/check"""

    @extend_schema(
        summary="Check one decision",
        description="""
Send `{"resource": "leads"}` for a coarse resource, or
`{"parent_id": "leave", "sub_item_id": "leave-approval"}` for a navigation
child. Unknown resources are denied. For navigation children the answer
covers the parent too, so a child is never allowed under a hidden parent.
        """,
        request=AccessCheckSerializer,
        tags=['Access Control']
    )
    def post(self, request):
        serializer = AccessCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        resolver = get_request_resolver(request)
        principal = request.principal

        if 'resource' in data:
            allowed = resolver.is_allowed(data['resource'], principal)
            result = {'resource': data['resource'], 'allowed': allowed}
        else:
            parent = find_nav_item(data['parent_id']) or {'id': data['parent_id']}
            parent_allowed = resolver.can_access_nav_item(principal, parent)
            sub_item_allowed = resolver.can_access_sub_item(data['parent_id'], data['sub_item_id'], principal)
            allowed = parent_allowed and sub_item_allowed
            result = {
                'parent_id': data['parent_id'],
                'sub_item_id': data['sub_item_id'],
                'parent_allowed': parent_allowed,
                'allowed': allowed,
            }

        logger.debug(
            f"Access check for principal {principal.id}: {result}",
            extra={'request_id': getattr(request, 'request_id', None)}
        )
        return Response(result, status=status.HTTP_200_OK)


class MyTeamView(CompanyScopedView):
    """GET /v1/access/team"""

    @extend_schema(
        summary="My direct reports",
        description="Direct reports of the caller in the selected company. Empty when the caller manages nobody.",
        tags=['Access Control']
    )
    def get(self, request):
        resolver = get_request_resolver(request)
        principal = request.principal

        report_ids = resolver.get_manager_team_members(principal.id)
        members = {
            str(membership.user_id): membership.user
            for membership in CompanyService.list_members(request.company)
        }
        return Response({
            'manager_id': principal.id,
            'report_ids': report_ids,
            'reports': UserSummarySerializer(
                [members[report_id] for report_id in report_ids if report_id in members], many=True
            ).data,
        })


@requires_resource(policy.TEAM_STRUCTURE)
class TeamStructureView(CompanyScopedView):
    """GET /v1/access/team-structure"""

    permission_classes = [IsAuthenticated, HasResourceAccess]

    @extend_schema(
        summary="Company org chart",
        description="Every reporting line in the selected company. Admin, HR and managers only.",
        responses={200: ReportingLineSerializer(many=True)},
        tags=['Access Control']
    )
    def get(self, request):
        lines = CompanyService.list_reporting_lines(request.company)
        return Response(ReportingLineSerializer(lines, many=True).data)
