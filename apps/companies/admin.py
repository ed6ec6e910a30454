"""
Django admin configuration for companies app.
"""
from django.contrib import admin
from .models import Company, CompanyMembership, ReportingLine


class CompanyMembershipInline(admin.TabularInline):
    model = CompanyMembership
    extra = 0
    fields = ['user', 'role', 'is_active', 'joined_at', 'last_seen_at']
    readonly_fields = ['joined_at', 'last_seen_at']
    raw_id_fields = ['user']


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'plan', 'is_active', 'created_at']
    list_filter = ['plan', 'is_active']
    search_fields = ['name', 'slug', 'domain']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    inlines = [CompanyMembershipInline]


@admin.register(CompanyMembership)
class CompanyMembershipAdmin(admin.ModelAdmin):
    list_display = ['user', 'company', 'role', 'is_active', 'last_seen_at']
    list_filter = ['role', 'is_active']
    search_fields = ['user__username', 'user__email', 'company__name']
    raw_id_fields = ['user', 'company']


@admin.register(ReportingLine)
class ReportingLineAdmin(admin.ModelAdmin):
    list_display = ['manager', 'report', 'company', 'created_at']
    search_fields = ['manager__username', 'report__username', 'company__name']
    raw_id_fields = ['manager', 'report', 'company']
