# Generated migration for companies, memberships and reporting lines

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.companies.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when the record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the record was last updated')),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, help_text='Timestamp when the record was soft deleted', null=True)),
                ('name', models.CharField(help_text='Company name', max_length=255)),
                ('slug', models.SlugField(help_text='URL-friendly identifier', max_length=100, unique=True)),
                ('plan', models.CharField(choices=[('free', 'Free'), ('basic', 'Basic'), ('professional', 'Professional'), ('enterprise', 'Enterprise')], db_index=True, default='free', max_length=20)),
                ('domain', models.CharField(blank=True, help_text="Subdomain used by the workspace (e.g. 'acme-corp')", max_length=100)),
                ('custom_domain', models.CharField(blank=True, max_length=255)),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Inactive companies cannot be accessed by their members')),
                ('subscription_end_date', models.DateTimeField(blank=True, null=True)),
                ('settings', models.JSONField(blank=True, default=apps.companies.models.default_company_settings, help_text='Locale settings: timezone, date_format, currency')),
                ('branding', models.JSONField(blank=True, default=apps.companies.models.default_branding, help_text='Colors, theme mode and logo URLs')),
            ],
            options={
                'verbose_name_plural': 'companies',
                'db_table': 'companies',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CompanyMembership',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('hr', 'HR'), ('manager', 'Manager'), ('employee', 'Employee'), ('finance', 'Finance'), ('accounts', 'Accounts')], db_index=True, default='employee', max_length=20)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('joined_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('last_seen_at', models.DateTimeField(blank=True, help_text='Last request made in this company (drives company switching order)', null=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='companies.company')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='company_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'company_memberships',
                'ordering': ['company__name'],
                'constraints': [
                    models.UniqueConstraint(fields=('company', 'user'), name='unique_company_member'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReportingLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reporting_lines', to='companies.company')),
                ('manager', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='managed_lines', to=settings.AUTH_USER_MODEL)),
                ('report', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reporting_lines', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'reporting_lines',
                'constraints': [
                    models.UniqueConstraint(fields=('company', 'manager', 'report'), name='unique_reporting_line'),
                    models.CheckConstraint(condition=models.Q(('manager', models.F('report')), _negated=True), name='reporting_line_not_self'),
                ],
            },
        ),
    ]
