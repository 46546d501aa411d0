"""
URL mappings for the DiaCare API.

Paths match the ones the dashboards call, so trailing slashes are
omitted throughout.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view, me_view
from .views import alerts, checks, dashboard, faults, health, interventions, invoices, machines, maintenance, users
from .views.email_check import test_email

urlpatterns = [
    # auth
    path('api/auth/login', login_view),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/me', me_view),

    # users
    path('api/users', users.users),
    path('api/users/<int:pk>', users.user_detail),

    # equipment
    path('api/machines', machines.machines),
    path('api/machines/<str:machine_id>', machines.machine_detail),
    path('api/faults', faults.faults),
    path('api/faults/<int:pk>', faults.fault_detail),
    path('api/interventions', interventions.interventions),
    path('api/interventions/<int:pk>', interventions.intervention_detail),

    # maintenance
    path('api/maintenance', maintenance.schedules),
    path('api/maintenance-controls', maintenance.controls),
    path('api/maintenance-controls/notify', checks.maintenance_notifications),
    path('api/maintenance-controls/check', checks.check_controls),
    path('api/maintenance-notifications', checks.maintenance_notifications),

    # checks
    path('api/maintenance-schedule/check-alerts', checks.check_schedule_alerts),
    path('api/check-3min-controls', checks.check_three_minute_controls),
    path('api/check-intervention-alerts', checks.check_intervention_alerts),
    path('api/cron/check-reminders', checks.cron_check_reminders),

    # alerts, billing
    path('api/alerts', alerts.alerts),
    path('api/taxe', invoices.invoices),

    # dashboards
    path('api/dashboard/admin', dashboard.admin_dashboard),
    path('api/dashboard/technician', dashboard.technician_dashboard),
    path('api/dashboard/patient', dashboard.patient_dashboard),

    path('api/test-email', test_email),
    path('healthz', health.healthz),
    path('', include('django_prometheus.urls')),
]
