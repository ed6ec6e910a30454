"""
Company URLs.

- /v1/companies: the caller's companies (company switcher)
- /v1/platform/...: super-admin console
"""
from django.urls import path

from apps.companies.views import MyCompaniesView
from apps.companies.views_platform import (
    PlatformCompanyListView,
    PlatformCompanyDetailView,
    PlatformCompanyStatusView,
    PlatformCompanyMembersView,
    PlatformCompanyMemberDetailView,
    PlatformReportingLinesView,
    PlatformReportingLineDetailView,
    PlatformUserListView,
    PlatformUserDetailView,
)

app_name = 'companies'

urlpatterns = [
    path('companies', MyCompaniesView.as_view(), name='my-companies'),

    # Platform console
    path('platform/companies', PlatformCompanyListView.as_view(), name='platform-company-list'),
    path('platform/companies/<str:company_id>', PlatformCompanyDetailView.as_view(), name='platform-company-detail'),
    path('platform/companies/<str:company_id>/status', PlatformCompanyStatusView.as_view(),
         name='platform-company-status'),
    path('platform/companies/<str:company_id>/members', PlatformCompanyMembersView.as_view(),
         name='platform-company-members'),
    path('platform/companies/<str:company_id>/members/<str:user_id>', PlatformCompanyMemberDetailView.as_view(),
         name='platform-company-member-detail'),
    path('platform/companies/<str:company_id>/reporting-lines', PlatformReportingLinesView.as_view(),
         name='platform-reporting-lines'),
    path('platform/companies/<str:company_id>/reporting-lines/<str:manager_id>/<str:report_id>',
         PlatformReportingLineDetailView.as_view(), name='platform-reporting-line-detail'),
    path('platform/users', PlatformUserListView.as_view(), name='platform-user-list'),
    path('platform/users/<str:user_id>', PlatformUserDetailView.as_view(), name='platform-user-detail'),
]
