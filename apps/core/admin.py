"""
Django admin configuration for core app.
"""
from django.contrib import admin
from apps.core.models import AuditLog


admin.site.site_header = "TEM Administration"
admin.site.site_title = "TEM Admin"
admin.site.index_title = "Welcome to TEM Administration"


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only view of the audit trail."""

    list_display = ['created_at', 'action', 'company', 'user', 'target_type', 'target_id']
    list_filter = ['action', 'target_type']
    search_fields = ['action', 'target_id', 'request_id']
    ordering = ['-created_at']
    readonly_fields = [
        'company', 'user', 'action', 'target_type', 'target_id', 'diff', 'metadata',
        'ip_address', 'user_agent', 'request_id', 'created_at',
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
