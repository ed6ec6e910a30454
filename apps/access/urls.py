"""
Access API URLs (company-scoped, mounted under /v1/access/).
"""
from django.urls import path

from apps.access.views import (
    AccessSummaryView,
    NavigationView,
    AccessibleEmployeesView,
    EmployeeAccessView,
    AccessCheckView,
    MyTeamView,
    TeamStructureView,
)

app_name = 'access'

urlpatterns = [
    path('me', AccessSummaryView.as_view(), name='me'),
    path('navigation', NavigationView.as_view(), name='navigation'),
    path('employees', AccessibleEmployeesView.as_view(), name='employees'),
    path('employees/<str:employee_id>', EmployeeAccessView.as_view(), name='employee-access'),
    path('check', AccessCheckView.as_view(), name='check'),
    path('team', MyTeamView.as_view(), name='team'),
    path('team-structure', TeamStructureView.as_view(), name='team-structure'),
]
