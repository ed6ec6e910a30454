"""
Tests for the company switcher and the platform console API.
"""
import pytest

from apps.companies.models import Company, CompanyMembership, ReportingLine
from apps.core.models import AuditLog


@pytest.mark.django_db
class TestMyCompanies:

    def test_requires_login(self, api_client):
        response = api_client.get('/v1/companies')

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'NOT_AUTHENTICATED'

    def test_lists_memberships_with_roles(self, api_client, company, other_company, manager_user):
        CompanyMembership.objects.create(company=other_company, user=manager_user, role='hr')
        api_client.force_login(manager_user)

        data = api_client.get('/v1/companies').json()

        assert [(entry['company']['slug'], entry['role']) for entry in data] == [
            ('acme-corp', 'manager'),
            ('globex', 'hr'),
        ]
        assert data[1]['role_label'] == 'HR'

    def test_company_scoped_request_moves_company_first(self, api_client, company_client, other_company,
                                                         manager_user):
        CompanyMembership.objects.create(company=other_company, user=manager_user, role='hr')
        company_client(manager_user, other_company).get('/v1/access/me')

        data = api_client.get('/v1/companies').json()

        assert data[0]['company']['slug'] == 'globex'


@pytest.mark.django_db
class TestPlatformAccess:

    @pytest.mark.parametrize('path', [
        '/v1/platform/companies',
        '/v1/platform/users',
    ])
    def test_company_admin_is_denied(self, api_client, admin_user, path):
        api_client.force_login(admin_user)

        response = api_client.get(path)

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'PERMISSION_DENIED'

    def test_anonymous_is_denied(self, api_client):
        assert api_client.get('/v1/platform/companies').status_code == 403


@pytest.mark.django_db
class TestPlatformCompanies:

    def test_list(self, platform_client, company, other_company, employee_user):
        data = platform_client.get('/v1/platform/companies').json()

        assert [(c['slug'], c['member_count']) for c in data] == [('acme-corp', 1), ('globex', 0)]

    def test_list_filters(self, platform_client, company, other_company):
        other_company.is_active = False
        other_company.save()

        assert [c['slug'] for c in platform_client.get('/v1/platform/companies?search=acme').json()] == [
            'acme-corp'
        ]
        assert [c['slug'] for c in platform_client.get('/v1/platform/companies?is_active=false').json()] == [
            'globex'
        ]

    def test_create(self, platform_client, company):
        response = platform_client.post(
            '/v1/platform/companies',
            {'name': 'Acme Corp', 'plan': 'enterprise', 'branding': {'theme_mode': 'dark'}},
            format='json'
        )

        assert response.status_code == 201
        data = response.json()
        assert data['slug'] == 'acme-corp-1'
        assert data['plan'] == 'enterprise'
        assert data['branding'] == {'theme_mode': 'dark'}
        assert data['member_count'] == 0

    @pytest.mark.parametrize('body', [
        {},
        {'name': '   '},
        {'name': 'Bad', 'branding': {'theme_mode': 'neon'}},
        {'name': 'Bad', 'plan': 'gold'},
    ])
    def test_create_invalid(self, platform_client, body):
        response = platform_client.post('/v1/platform/companies', body, format='json')

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    def test_create_is_rate_limited(self, platform_client):
        for index in range(30):
            response = platform_client.post('/v1/platform/companies', {'name': f'Co {index}'}, format='json')
            assert response.status_code == 201

        response = platform_client.post('/v1/platform/companies', {'name': 'One too many'}, format='json')

        assert response.status_code == 429
        assert response.json()['error']['code'] == 'RATE_LIMIT_EXCEEDED'
        assert response['Retry-After'] == '60'

    def test_detail(self, platform_client, company):
        data = platform_client.get(f'/v1/platform/companies/{company.id}').json()

        assert data['id'] == str(company.id)
        assert data['settings']['timezone'] == 'UTC'

    @pytest.mark.parametrize('company_id', ['missing', '00000000-0000-0000-0000-000000000000'])
    def test_detail_not_found(self, platform_client, company_id):
        response = platform_client.get(f'/v1/platform/companies/{company_id}')

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'COMPANY_NOT_FOUND'

    def test_update(self, platform_client, company):
        response = platform_client.patch(
            f'/v1/platform/companies/{company.id}',
            {'plan': 'professional', 'slug': 'renamed'},
            format='json'
        )

        assert response.status_code == 200
        company.refresh_from_db()
        assert company.plan == 'professional'
        assert company.slug == 'acme-corp'

    def test_delete(self, platform_client, company, employee_user):
        response = platform_client.delete(f'/v1/platform/companies/{company.id}')

        assert response.status_code == 204
        assert not Company.objects.filter(id=company.id).exists()
        assert platform_client.get(f'/v1/platform/companies/{company.id}').status_code == 404

    def test_toggle_status(self, platform_client, company):
        data = platform_client.post(f'/v1/platform/companies/{company.id}/status', {}, format='json').json()
        assert data['is_active'] is False

        data = platform_client.post(f'/v1/platform/companies/{company.id}/status', {}, format='json').json()
        assert data['is_active'] is True

    def test_set_status(self, platform_client, company):
        data = platform_client.post(
            f'/v1/platform/companies/{company.id}/status', {'is_active': False}, format='json'
        ).json()

        assert data['is_active'] is False
        entry = AuditLog.objects.by_action('company_deactivated').get()
        assert entry.request_id


@pytest.mark.django_db
class TestPlatformMembers:

    def test_list(self, platform_client, company, manager_user, employee_user):
        data = platform_client.get(f'/v1/platform/companies/{company.id}/members').json()

        assert [(m['user']['username'], m['role']) for m in data] == [
            ('emily.employee', 'employee'),
            ('mike.manager', 'manager'),
        ]

    def test_assign(self, platform_client, company, other_company, make_member):
        user = make_member(other_company, 'transfer')

        response = platform_client.post(
            f'/v1/platform/companies/{company.id}/members',
            {'user_id': str(user.pk), 'role': 'accounts'},
            format='json'
        )

        assert response.status_code == 201
        assert response.json()['role'] == 'accounts'
        assert CompanyMembership.objects.get_membership(company, user).role == 'accounts'

    def test_assign_unknown_role(self, platform_client, company, employee_user):
        response = platform_client.post(
            f'/v1/platform/companies/{company.id}/members',
            {'user_id': str(employee_user.pk), 'role': 'owner'},
            format='json'
        )

        assert response.status_code == 400

    def test_assign_unknown_user(self, platform_client, company):
        response = platform_client.post(
            f'/v1/platform/companies/{company.id}/members',
            {'user_id': '424242', 'role': 'employee'},
            format='json'
        )

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'USER_NOT_FOUND'

    def test_remove(self, platform_client, company, employee_user, reporting_line):
        response = platform_client.delete(f'/v1/platform/companies/{company.id}/members/{employee_user.pk}')

        assert response.status_code == 204
        assert not ReportingLine.objects.exists()

    def test_remove_twice(self, platform_client, company, employee_user):
        platform_client.delete(f'/v1/platform/companies/{company.id}/members/{employee_user.pk}')

        response = platform_client.delete(f'/v1/platform/companies/{company.id}/members/{employee_user.pk}')

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'MEMBERSHIP_NOT_FOUND'


@pytest.mark.django_db
class TestPlatformReportingLines:

    def url(self, company):
        return f'/v1/platform/companies/{company.id}/reporting-lines'

    def test_add_and_list(self, platform_client, company, manager_user, employee_user):
        response = platform_client.post(
            self.url(company),
            {'manager_id': str(manager_user.pk), 'report_id': str(employee_user.pk)},
            format='json'
        )

        assert response.status_code == 201
        data = platform_client.get(self.url(company)).json()
        assert [(line['manager']['username'], line['report']['username']) for line in data] == [
            ('mike.manager', 'emily.employee')
        ]

    def test_duplicate(self, platform_client, company, reporting_line):
        response = platform_client.post(
            self.url(company),
            {'manager_id': str(reporting_line.manager.pk), 'report_id': str(reporting_line.report.pk)},
            format='json'
        )

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'CONFLICT'

    def test_self_reporting(self, platform_client, company, manager_user):
        response = platform_client.post(
            self.url(company),
            {'manager_id': str(manager_user.pk), 'report_id': str(manager_user.pk)},
            format='json'
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'

    def test_non_member(self, platform_client, company, other_company, manager_user, make_member):
        outsider = make_member(other_company, 'outsider')

        response = platform_client.post(
            self.url(company),
            {'manager_id': str(manager_user.pk), 'report_id': str(outsider.pk)},
            format='json'
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_REPORTING_LINE'

    def test_remove(self, platform_client, company, reporting_line):
        path = f'{self.url(company)}/{reporting_line.manager.pk}/{reporting_line.report.pk}'

        assert platform_client.delete(path).status_code == 204
        response = platform_client.delete(path)
        assert response.status_code == 404
        assert response.json()['error']['code'] == 'REPORTING_LINE_NOT_FOUND'


@pytest.mark.django_db
class TestPlatformUsers:

    def test_list(self, platform_client, company, employee_user):
        data = platform_client.get('/v1/platform/users?search=emily').json()

        assert len(data) == 1
        assert data[0]['username'] == 'emily.employee'
        assert data[0]['company_count'] == 1

    def test_create(self, platform_client):
        response = platform_client.post(
            '/v1/platform/users',
            {'username': 'nina', 'email': 'nina@example.com', 'password': 'long-enough'},
            format='json'
        )

        assert response.status_code == 201
        data = response.json()
        assert data['username'] == 'nina'
        assert data['company_count'] == 0
        assert 'password' not in data

    def test_create_short_password(self, platform_client):
        response = platform_client.post(
            '/v1/platform/users', {'username': 'nina', 'password': 'short'}, format='json'
        )

        assert response.status_code == 400

    def test_create_duplicate(self, platform_client):
        response = platform_client.post('/v1/platform/users', {'username': 'root'}, format='json')

        assert response.status_code == 409

    def test_update(self, platform_client, employee_user):
        response = platform_client.patch(
            f'/v1/platform/users/{employee_user.pk}', {'last_name': 'Stone'}, format='json'
        )

        assert response.status_code == 200
        assert response.json()['last_name'] == 'Stone'

    def test_delete(self, platform_client, employee_user):
        response = platform_client.delete(f'/v1/platform/users/{employee_user.pk}')

        assert response.status_code == 204
        employee_user.refresh_from_db()
        assert employee_user.is_active is False

    def test_cannot_delete_self(self, platform_client, super_admin):
        response = platform_client.delete(f'/v1/platform/users/{super_admin.pk}')

        assert response.status_code == 400

    @pytest.mark.parametrize('body', [
        {'is_active': False},
        {'is_superuser': False},
        {'is_active': False, 'is_superuser': False},
    ])
    def test_cannot_lock_out_self(self, platform_client, super_admin, body):
        response = platform_client.patch(f'/v1/platform/users/{super_admin.pk}', body, format='json')

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'BAD_REQUEST'
        super_admin.refresh_from_db()
        assert super_admin.is_active is True
        assert super_admin.is_superuser is True

    def test_self_update_of_other_fields(self, platform_client, super_admin):
        response = platform_client.patch(
            f'/v1/platform/users/{super_admin.pk}', {'first_name': 'Ada', 'is_active': True}, format='json'
        )

        assert response.status_code == 200
        assert response.json()['first_name'] == 'Ada'

    def test_can_demote_another_super_admin(self, platform_client, make_member, company):
        other = make_member(company, 'second.root', 'admin', is_superuser=True)

        response = platform_client.patch(f'/v1/platform/users/{other.pk}', {'is_superuser': False}, format='json')

        assert response.status_code == 200
        assert response.json()['is_superuser'] is False

    def test_username_cannot_be_changed(self, platform_client, employee_user):
        response = platform_client.patch(
            f'/v1/platform/users/{employee_user.pk}', {'username': 'renamed'}, format='json'
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'
        assert 'username' in response.json()['error']['details']
        employee_user.refresh_from_db()
        assert employee_user.username == 'emily.employee'

    def test_missing_user(self, platform_client):
        assert platform_client.get('/v1/platform/users/999999').status_code == 404
