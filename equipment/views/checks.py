"""
On-demand check endpoints.

Each endpoint runs one check pass (classify, de-duplicate, emit,
advance) and returns its report.  ``/api/cron/check-reminders`` is meant
for an external scheduler and authenticates with ``?key=`` instead of a
user token.
"""
from __future__ import annotations

import secrets

from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from equipment.models import MaintenanceControl
from equipment.permissions import IsStaffRole
from equipment.services import checks
from equipment.views.maintenance import serialize_control


def _report_response(report, **extra):
    data = report.to_dict()
    data['timestamp'] = timezone.now().isoformat()
    data.update(extra)
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
@throttle_classes([ScopedRateThrottle])
def check_schedule_alerts(request):
    return _report_response(checks.check_schedules())

check_schedule_alerts.cls.throttle_scope = 'checks'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
@throttle_classes([ScopedRateThrottle])
def check_three_minute_controls(request):
    """3-minute controls and 3-minute schedules in one pass."""
    controls = checks.check_controls(control_types=[MaintenanceControl.TYPE_3_MINUTES])
    schedules = checks.check_schedules(schedule_types=['3-minute'])
    return _report_response(
        controls,
        alertsCreated=controls.alerts_created + schedules.alerts_created,
        schedules=schedules.to_dict(),
    )

check_three_minute_controls.cls.throttle_scope = 'checks'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
@throttle_classes([ScopedRateThrottle])
def check_controls(request):
    return _report_response(checks.check_controls())

check_controls.cls.throttle_scope = 'checks'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
@throttle_classes([ScopedRateThrottle])
def check_intervention_alerts(request):
    return _report_response(checks.check_intervention_reminders())

check_intervention_alerts.cls.throttle_scope = 'checks'


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def cron_check_reminders(request):
    expected = settings.CRON_SECRET_KEY
    given = request.query_params.get('key') or ''
    if not expected or not secrets.compare_digest(given, expected):
        return Response({'error': 'Unauthorized'}, status=401)
    reminders = checks.check_intervention_reminders()
    notifications = checks.send_maintenance_notifications()
    return _report_response(reminders, notifications=notifications.to_dict())


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def maintenance_notifications(request):
    """GET previews the overdue and upcoming controls; POST emails the digests."""
    if request.method == 'GET':
        due = checks.due_controls()
        return Response({
            'overdue': [serialize_control(c) for c in due['overdue']],
            'upcoming': [serialize_control(c) for c in due['upcoming']],
            'overdueCount': len(due['overdue']),
            'upcomingCount': len(due['upcoming']),
        })
    return _report_response(checks.send_maintenance_notifications())
