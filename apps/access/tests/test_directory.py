"""
Tests for team directories, roles and principals.
"""
import pytest

from apps.access.directory import DEMO_MANAGER_TEAMS, StaticTeamDirectory, load_company_directory
from apps.access.principal import Principal
from apps.access.roles import ALL_ROLES, Role


class TestStaticTeamDirectory:

    def test_demo_teams(self):
        directory = StaticTeamDirectory(DEMO_MANAGER_TEAMS)

        assert directory.get_reports('3') == ('2', '6')
        assert directory.get_reports('2') == ('4',)
        assert directory.get_reports('5') == ('7', '8')
        assert len(directory) == 3

    def test_missing_manager_has_no_reports(self):
        assert StaticTeamDirectory(DEMO_MANAGER_TEAMS).get_reports('4') == ()
        assert StaticTeamDirectory().get_reports('1') == ()

    def test_ids_are_normalized_and_deduplicated(self):
        directory = StaticTeamDirectory({3: [2, '6', 2]})

        assert directory.get_reports('3') == ('2', '6')
        assert directory.get_reports(3) == ('2', '6')

    def test_snapshot_is_independent_of_source(self):
        source = {'3': ['2']}
        directory = StaticTeamDirectory(source)
        source['3'].append('6')

        assert directory.get_reports('3') == ('2',)
        assert directory.as_dict() == {'3': ['2']}

    def test_repr(self):
        assert repr(StaticTeamDirectory({'1': ['2']})) == "StaticTeamDirectory({'1': ['2']})"


@pytest.mark.django_db
class TestLoadCompanyDirectory:

    def test_loads_active_lines_in_order(self, company, make_member):
        from apps.companies.models import ReportingLine

        manager = make_member(company, 'mgr', 'manager')
        first = make_member(company, 'first')
        second = make_member(company, 'second')
        ReportingLine.objects.create(company=company, manager=manager, report=first)
        ReportingLine.objects.create(company=company, manager=manager, report=second)

        directory = load_company_directory(company)

        assert directory.get_reports(str(manager.pk)) == (str(first.pk), str(second.pk))

    def test_inactive_members_are_dropped(self, company, make_member):
        from apps.companies.models import CompanyMembership, ReportingLine

        manager = make_member(company, 'mgr', 'manager')
        report = make_member(company, 'gone')
        ReportingLine.objects.create(company=company, manager=manager, report=report)
        CompanyMembership.objects.filter(user=report).update(is_active=False)

        assert load_company_directory(company).get_reports(str(manager.pk)) == ()

    def test_other_companies_are_ignored(self, company, other_company, make_member):
        from apps.companies.models import CompanyMembership, ReportingLine

        manager = make_member(other_company, 'mgr', 'manager')
        report = make_member(other_company, 'rep')
        CompanyMembership.objects.create(company=company, user=manager, role='manager')
        CompanyMembership.objects.create(company=company, user=report, role='employee')
        ReportingLine.objects.create(company=other_company, manager=manager, report=report)

        assert len(load_company_directory(company)) == 0
        assert len(load_company_directory(other_company)) == 1


class TestRole:

    def test_parse(self):
        assert Role.parse('hr') is Role.HR
        assert Role.parse(Role.ADMIN) is Role.ADMIN
        assert Role.parse('HR') is None
        assert Role.parse('') is None
        assert Role.parse(None) is None
        assert Role.parse(1) is None

    def test_labels(self):
        assert Role.HR.label == 'HR'
        assert Role.ACCOUNTS.label == 'Accounts'
        assert ('manager', 'Manager') in Role.choices()
        assert len(ALL_ROLES) == 6


class TestPrincipal:

    def test_id_is_coerced_to_string(self):
        assert Principal(7, 'employee').id == '7'

    def test_unknown_role_is_preserved(self):
        user = Principal('1', 'contractor')

        assert user.role == 'contractor'
        assert user.known_role is None
        assert user.has_role(Role.EMPLOYEE) is False

    def test_has_role(self):
        assert Principal('1', 'manager').has_role(Role.ADMIN, Role.MANAGER) is True

    def test_frozen(self):
        user = Principal('1', 'employee')
        with pytest.raises(AttributeError):
            user.role = 'admin'

    @pytest.mark.django_db
    def test_from_membership(self, company, make_member):
        from apps.companies.models import CompanyMembership

        user = make_member(company, 'boss', 'admin', is_superuser=True)
        membership = CompanyMembership.objects.get(company=company, user=user)

        principal = Principal.from_membership(membership)

        assert principal == Principal(str(user.pk), 'admin', True)

    @pytest.mark.django_db
    def test_for_user(self, super_admin):
        principal = Principal.for_user(super_admin)

        assert principal.id == str(super_admin.pk)
        assert principal.role is None
        assert principal.is_super_admin is True
