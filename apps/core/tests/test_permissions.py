"""
Tests for permission classes and the requires_resource decorator.
"""
from unittest.mock import patch

import pytest
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory
from rest_framework.views import APIView

from apps.access.directory import StaticTeamDirectory
from apps.access.principal import Principal
from apps.core.permissions import (
    HasCompanyContext,
    HasResourceAccess,
    IsSuperAdmin,
    get_request_resolver,
    requires_resource,
)


@requires_resource('reports')
class ReportView(APIView):
    permission_classes = [HasResourceAccess]

    def get(self, request):
        pass

    @requires_resource('company-settings')
    def post(self, request):
        pass


class OpenView(APIView):
    def get(self, request):
        pass


def make_request(method='get', principal=None, user=None, company=None):
    request = getattr(RequestFactory(), method)('/v1/access/reports')
    request.user = user or AnonymousUser()
    request.principal = principal
    request.company = company
    request.team_directory = None
    return request


class TestRequiresResource:

    def test_sets_tags(self):
        assert ReportView.required_resources == ['reports']
        assert ReportView.post.required_resources == ['company-settings']

    def test_method_tags_win(self):
        permission = HasResourceAccess()
        hr = Principal('1', 'hr')

        assert permission.has_permission(make_request('get', hr), ReportView()) is True
        assert permission.has_permission(make_request('post', hr), ReportView()) is False


class TestHasResourceAccess:

    def test_requires_company_context(self):
        assert HasResourceAccess().has_permission(make_request(), ReportView()) is False
        assert HasCompanyContext().has_permission(make_request(), OpenView()) is False

    def test_no_tags_allows(self):
        request = make_request(principal=Principal('1', 'employee'))

        assert HasResourceAccess().has_permission(request, OpenView()) is True

    def test_string_tag(self):
        view = OpenView()
        view.required_resources = 'leads'

        assert HasResourceAccess().has_permission(make_request(principal=Principal('1', 'manager')), view) is True
        assert HasResourceAccess().has_permission(make_request(principal=Principal('1', 'hr')), view) is False

    def test_denial_is_security_logged(self):
        request = make_request(principal=Principal('4', 'employee'))

        with patch('apps.core.permissions.SecurityLogger.log_access_denied') as log:
            assert HasResourceAccess().has_permission(request, ReportView()) is False

        log.assert_called_once_with(request.principal, 'reports', company=None, path='/v1/access/reports')


class TestGetRequestResolver:

    def test_memoized_and_uses_team_directory(self):
        request = make_request()
        request.team_directory = StaticTeamDirectory({'3': ['2']})

        resolver = get_request_resolver(request)

        assert get_request_resolver(request) is resolver
        assert resolver.is_direct_report('3', '2') is True


@pytest.mark.django_db
class TestIsSuperAdmin:

    def test_super_admin(self, super_admin):
        assert IsSuperAdmin().has_permission(make_request(user=super_admin), OpenView()) is True

    def test_company_admin(self, admin_user):
        assert IsSuperAdmin().has_permission(make_request(user=admin_user), OpenView()) is False

    def test_anonymous(self):
        assert IsSuperAdmin().has_permission(make_request(), OpenView()) is False
