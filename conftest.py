"""
Pytest configuration and fixtures.
"""
import pytest
from django.conf import settings
import django


def pytest_configure(config):
    """Configure Django settings for tests."""
    settings.DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'ATOMIC_REQUESTS': False,
    }
    # The test client speaks plain HTTP
    settings.SECURE_SSL_REDIRECT = False
    django.setup()


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limit counters live in the cache; start every test from zero."""
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def company(db):
    """Create a test company."""
    from apps.companies.models import Company
    return Company.objects.create(
        name='Acme Corporation',
        slug='acme-corp',
        domain='acme-corp',
    )


@pytest.fixture
def other_company(db):
    """Create another company for isolation tests."""
    from apps.companies.models import Company
    return Company.objects.create(
        name='Globex',
        slug='globex',
        domain='globex',
    )


@pytest.fixture
def make_member(db):
    """
    Factory: create a user and give them a role in a company.

        manager = make_member(company, 'mike', 'manager')
    """
    from django.contrib.auth import get_user_model
    from apps.companies.models import CompanyMembership

    User = get_user_model()

    def _make(company, username, role='employee', **user_fields):
        user = User.objects.create_user(
            username=username,
            email=f'{username}@example.com',
            password='testpass123',
            **user_fields
        )
        CompanyMembership.objects.create(company=company, user=user, role=role)
        return user

    return _make


@pytest.fixture
def admin_user(company, make_member):
    return make_member(company, 'alice.admin', 'admin')


@pytest.fixture
def hr_user(company, make_member):
    return make_member(company, 'henry.hr', 'hr')


@pytest.fixture
def manager_user(company, make_member):
    return make_member(company, 'mike.manager', 'manager')


@pytest.fixture
def employee_user(company, make_member):
    return make_member(company, 'emily.employee', 'employee')


@pytest.fixture
def reporting_line(company, manager_user, employee_user):
    """employee_user reports directly to manager_user."""
    from apps.companies.models import ReportingLine
    return ReportingLine.objects.create(company=company, manager=manager_user, report=employee_user)


@pytest.fixture
def super_admin(db):
    """Platform super admin with no company membership."""
    from django.contrib.auth import get_user_model
    User = get_user_model()
    return User.objects.create_superuser(
        username='root',
        email='root@example.com',
        password='testpass123',
    )


@pytest.fixture
def company_client(api_client, company):
    """
    Factory: API client logged in as `user` with X-COMPANY-ID set.

        client = company_client(manager_user)
    """
    def _client(user, target_company=None):
        api_client.force_login(user)
        api_client.credentials(HTTP_X_COMPANY_ID=str((target_company or company).id))
        return api_client

    return _client


@pytest.fixture
def platform_client(api_client, super_admin):
    """API client logged in as the platform super admin."""
    api_client.force_login(super_admin)
    return api_client
