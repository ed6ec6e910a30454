"""
Platform console API (super admins only).

Handles:
- Company list/create/detail/update/delete and activation toggling
- Company members (assign with a role, remove)
- Reporting lines inside a company
- Platform user accounts
"""
import logging

from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from drf_spectacular.utils import OpenApiParameter, extend_schema
from drf_spectacular.types import OpenApiTypes
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsSuperAdmin
from .serializers import (
    CompanyDetailSerializer,
    CompanyListSerializer,
    CompanyStatusSerializer,
    CompanyWriteSerializer,
    MembershipAssignSerializer,
    MembershipSerializer,
    PlatformUserSerializer,
    PlatformUserUpdateSerializer,
    PlatformUserWriteSerializer,
    ReportingLineSerializer,
    ReportingLineWriteSerializer,
)
from .services import CompanyService, PlatformUserService

logger = logging.getLogger(__name__)

SEARCH_PARAMETER = OpenApiParameter(
    name='search', type=OpenApiTypes.STR, location=OpenApiParameter.QUERY,
    description='Case-insensitive substring filter'
)


def _parse_bool(value):
    if value is None:
        return None
    return value.lower() in ('1', 'true', 'yes')


class PlatformView(APIView):
    """Base class for console endpoints."""

    permission_classes = [IsAuthenticated, IsSuperAdmin]


class PlatformCompanyListView(PlatformView):
    """
    GET  /v1/platform/companies
    POST /v1/platform/companies
    """

    @extend_schema(
        summary="List companies",
        parameters=[
            SEARCH_PARAMETER,
            OpenApiParameter(name='is_active', type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY),
        ],
        responses={200: CompanyListSerializer(many=True)},
        tags=['Platform Console']
    )
    def get(self, request):
        companies = CompanyService.list_companies(
            search=request.query_params.get('search'),
            is_active=_parse_bool(request.query_params.get('is_active')),
        )
        return Response(CompanyListSerializer(companies, many=True).data)

    @extend_schema(
        summary="Create company",
        description="""
Create a company. The slug is generated from the name when omitted and is
suffixed (-1, -2, ...) until it is unique, including against deleted companies.

Rate limited to 30 requests per minute per user.
        """,
        request=CompanyWriteSerializer,
        responses={201: CompanyDetailSerializer},
        tags=['Platform Console']
    )
    @method_decorator(ratelimit(key='user_or_ip', rate='30/m', method='POST', block=True))
    def post(self, request):
        serializer = CompanyWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        company = CompanyService.create_company(request.user, request=request, **serializer.validated_data)
        return Response(CompanyDetailSerializer(company).data, status=status.HTTP_201_CREATED)


class PlatformCompanyDetailView(PlatformView):
    """
    GET    /v1/platform/companies/{company_id}
    PATCH  /v1/platform/companies/{company_id}
    DELETE /v1/platform/companies/{company_id}
    """

    @extend_schema(
        summary="Get company",
        responses={200: CompanyDetailSerializer},
        tags=['Platform Console']
    )
    def get(self, request, company_id):
        company = CompanyService.get_company(company_id)
        return Response(CompanyDetailSerializer(company).data)

    @extend_schema(
        summary="Update company",
        request=CompanyWriteSerializer,
        responses={200: CompanyDetailSerializer},
        tags=['Platform Console']
    )
    def patch(self, request, company_id):
        company = CompanyService.get_company(company_id)
        serializer = CompanyWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        data.pop('slug', None)
        company = CompanyService.update_company(request.user, company, data, request=request)
        return Response(CompanyDetailSerializer(company).data)

    @extend_schema(
        summary="Delete company",
        description="Soft delete the company and deactivate all of its memberships.",
        responses={204: None},
        tags=['Platform Console']
    )
    def delete(self, request, company_id):
        company = CompanyService.get_company(company_id)
        CompanyService.delete_company(request.user, company, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PlatformCompanyStatusView(PlatformView):
    """POST /v1/platform/companies/{company_id}/status"""

    @extend_schema(
        summary="Activate or deactivate company",
        description="""
Set `is_active` explicitly, or send an empty body to toggle the current state.
Members of an inactive company get COMPANY_INACTIVE on company-scoped requests.
        """,
        request=CompanyStatusSerializer,
        responses={200: CompanyDetailSerializer},
        tags=['Platform Console']
    )
    def post(self, request, company_id):
        company = CompanyService.get_company(company_id)
        serializer = CompanyStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if 'is_active' in serializer.validated_data:
            company = CompanyService.set_company_active(
                request.user, company, serializer.validated_data['is_active'], request=request
            )
        else:
            company = CompanyService.toggle_company_status(request.user, company, request=request)
        return Response(CompanyDetailSerializer(company).data)


class PlatformCompanyMembersView(PlatformView):
    """
    GET  /v1/platform/companies/{company_id}/members
    POST /v1/platform/companies/{company_id}/members
    """

    @extend_schema(
        summary="List company members",
        responses={200: MembershipSerializer(many=True)},
        tags=['Platform Console']
    )
    def get(self, request, company_id):
        company = CompanyService.get_company(company_id)
        members = CompanyService.list_members(company)
        return Response(MembershipSerializer(members, many=True).data)

    @extend_schema(
        summary="Assign user to company",
        description="Give a user a role in the company. An existing membership is reactivated with the new role.",
        request=MembershipAssignSerializer,
        responses={201: MembershipSerializer},
        tags=['Platform Console']
    )
    def post(self, request, company_id):
        company = CompanyService.get_company(company_id)
        serializer = MembershipAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = PlatformUserService.get_user(serializer.validated_data['user_id'])
        membership = CompanyService.assign_user_to_company(
            request.user, company, user, serializer.validated_data['role'], request=request
        )
        return Response(MembershipSerializer(membership).data, status=status.HTTP_201_CREATED)


class PlatformCompanyMemberDetailView(PlatformView):
    """DELETE /v1/platform/companies/{company_id}/members/{user_id}"""

    @extend_schema(
        summary="Remove user from company",
        description="Deactivate the membership and drop the user's reporting lines in this company.",
        responses={204: None},
        tags=['Platform Console']
    )
    def delete(self, request, company_id, user_id):
        company = CompanyService.get_company(company_id)
        user = PlatformUserService.get_user(user_id)
        CompanyService.remove_user_from_company(request.user, company, user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PlatformReportingLinesView(PlatformView):
    """
    GET  /v1/platform/companies/{company_id}/reporting-lines
    POST /v1/platform/companies/{company_id}/reporting-lines
    """

    @extend_schema(
        summary="List reporting lines",
        responses={200: ReportingLineSerializer(many=True)},
        tags=['Platform Console']
    )
    def get(self, request, company_id):
        company = CompanyService.get_company(company_id)
        lines = CompanyService.list_reporting_lines(company)
        return Response(ReportingLineSerializer(lines, many=True).data)

    @extend_schema(
        summary="Add reporting line",
        description="Record that `report_id` reports directly to `manager_id`. Both must be active members.",
        request=ReportingLineWriteSerializer,
        responses={201: ReportingLineSerializer},
        tags=['Platform Console']
    )
    def post(self, request, company_id):
        company = CompanyService.get_company(company_id)
        serializer = ReportingLineWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        manager, report = PlatformUserService.get_users([
            serializer.validated_data['manager_id'],
            serializer.validated_data['report_id'],
        ])
        line = CompanyService.add_reporting_line(request.user, company, manager, report, request=request)
        return Response(ReportingLineSerializer(line).data, status=status.HTTP_201_CREATED)


class PlatformReportingLineDetailView(PlatformView):
    """DELETE /v1/platform/companies/{company_id}/reporting-lines/{manager_id}/{report_id}"""

    @extend_schema(
        summary="Remove reporting line",
        responses={204: None},
        tags=['Platform Console']
    )
    def delete(self, request, company_id, manager_id, report_id):
        company = CompanyService.get_company(company_id)
        manager, report = PlatformUserService.get_users([manager_id, report_id])
        CompanyService.remove_reporting_line(request.user, company, manager, report, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PlatformUserListView(PlatformView):
    """
    GET  /v1/platform/users
    POST /v1/platform/users
    """

    @extend_schema(
        summary="List users",
        parameters=[SEARCH_PARAMETER],
        responses={200: PlatformUserSerializer(many=True)},
        tags=['Platform Console']
    )
    def get(self, request):
        users = PlatformUserService.list_users(search=request.query_params.get('search'))
        return Response(PlatformUserSerializer(users, many=True).data)

    @extend_schema(
        summary="Create user",
        request=PlatformUserWriteSerializer,
        responses={201: PlatformUserSerializer},
        tags=['Platform Console']
    )
    @method_decorator(ratelimit(key='user_or_ip', rate='30/m', method='POST', block=True))
    def post(self, request):
        serializer = PlatformUserWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        user = PlatformUserService.create_user(
            request.user,
            data.pop('username'),
            email=data.pop('email', ''),
            password=data.pop('password', None),
            request=request,
            **data
        )
        return Response(PlatformUserSerializer(user).data, status=status.HTTP_201_CREATED)


class PlatformUserDetailView(PlatformView):
    """
    GET    /v1/platform/users/{user_id}
    PATCH  /v1/platform/users/{user_id}
    DELETE /v1/platform/users/{user_id}
    """

    @extend_schema(
        summary="Get user",
        responses={200: PlatformUserSerializer},
        tags=['Platform Console']
    )
    def get(self, request, user_id):
        user = PlatformUserService.get_user(user_id)
        return Response(PlatformUserSerializer(user).data)

    @extend_schema(
        summary="Update user",
        request=PlatformUserUpdateSerializer,
        responses={200: PlatformUserSerializer},
        tags=['Platform Console']
    )
    def patch(self, request, user_id):
        user = PlatformUserService.get_user(user_id)
        serializer = PlatformUserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = PlatformUserService.update_user(request.user, user, serializer.validated_data, request=request)
        return Response(PlatformUserSerializer(user).data)

    @extend_schema(
        summary="Delete user",
        description="Deactivate the account, its memberships and its reporting lines.",
        responses={204: None},
        tags=['Platform Console']
    )
    def delete(self, request, user_id):
        user = PlatformUserService.get_user(user_id)
        PlatformUserService.delete_user(request.user, user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)
