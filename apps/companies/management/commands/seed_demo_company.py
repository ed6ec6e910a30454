"""
Management command to create the demo company, its users and its org chart.

Creates:
- Demo company (Acme Corporation)
- One user per demo employee, with a membership carrying their role
- Reporting lines following the demo manager teams

Running it again is safe: existing rows are reused.
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.access.directory import DEMO_MANAGER_TEAMS
from apps.companies.models import Company, CompanyMembership, ReportingLine

User = get_user_model()

# (demo id, username, first name, last name, role)
DEMO_USERS = [
    ('1', 'john.doe', 'John', 'Doe', 'employee'),
    ('2', 'sarah.johnson', 'Sarah', 'Johnson', 'manager'),
    ('3', 'mike.chen', 'Mike', 'Chen', 'manager'),
    ('4', 'emily.davis', 'Emily', 'Davis', 'employee'),
    ('5', 'james.wilson', 'James', 'Wilson', 'manager'),
    ('6', 'lisa.anderson', 'Lisa', 'Anderson', 'employee'),
    ('7', 'david.brown', 'David', 'Brown', 'employee'),
    ('8', 'anna.lee', 'Anna', 'Lee', 'employee'),
    ('9', 'mike.wilson', 'Mike', 'Wilson', 'hr'),
    ('10', 'admin.user', 'Admin', 'User', 'admin'),
    ('11', 'fiona.grant', 'Fiona', 'Grant', 'finance'),
    ('12', 'oscar.reid', 'Oscar', 'Reid', 'accounts'),
]


class Command(BaseCommand):
    help = 'Create the demo company with users, roles and reporting lines'

    def add_arguments(self, parser):
        parser.add_argument(
            '--name',
            type=str,
            default='Acme Corporation',
            help='Company name (default: Acme Corporation)',
        )
        parser.add_argument(
            '--slug',
            type=str,
            default='acme-corp',
            help='Company slug (default: acme-corp)',
        )
        parser.add_argument(
            '--password',
            type=str,
            default='password',
            help='Password for every demo user (default: password)',
        )
        parser.add_argument(
            '--email-domain',
            type=str,
            default='acme.example.com',
            help='Domain for demo user emails',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        # Slugs stay reserved after a soft delete, so look through deleted rows too
        company, created = Company.objects_with_deleted.get_or_create(
            slug=options['slug'],
            defaults={'name': options['name'], 'domain': options['slug'], 'plan': 'enterprise'},
        )
        if company.is_deleted:
            company.restore()
            self.stdout.write(f"Restored deleted company: {company.name} ({company.id})")
        else:
            self.stdout.write(f"{'Created' if created else 'Using'} company: {company.name} ({company.id})")

        users_by_demo_id = {}
        for demo_id, username, first_name, last_name, role in DEMO_USERS:
            user, user_created = User.objects.get_or_create(
                username=username,
                defaults={
                    'first_name': first_name,
                    'last_name': last_name,
                    'email': f"{username}@{options['email_domain']}",
                },
            )
            if user_created:
                user.set_password(options['password'])
                user.save(update_fields=['password'])

            CompanyMembership.objects.update_or_create(
                company=company,
                user=user,
                defaults={'role': role, 'is_active': True},
            )
            users_by_demo_id[demo_id] = user
            self.stdout.write(f"  {username:<15} {role:<9} user id {user.pk}")

        lines = 0
        for manager_id, report_ids in DEMO_MANAGER_TEAMS.items():
            for report_id in report_ids:
                _, line_created = ReportingLine.objects.get_or_create(
                    company=company,
                    manager=users_by_demo_id[manager_id],
                    report=users_by_demo_id[report_id],
                )
                lines += int(line_created)

        self.stdout.write(self.style.SUCCESS(
            f"Demo company ready: {len(DEMO_USERS)} members, {lines} new reporting lines"
        ))
