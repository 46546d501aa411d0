"""
Dashboard endpoints.

One summary per role, shaped for the corresponding front-end page.
"""
from __future__ import annotations

from datetime import timedelta

from django.db.models import Count
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Alert, Fault, Intervention, Machine, MaintenanceControl, MaintenanceSchedule
from ..permissions import IsAdminRole, IsPatientRole, IsStaffRole
from ..services.alerts import serialize_alert
from .faults import serialize_fault
from .maintenance import serialize_control, serialize_schedule


def _counts(qs, field: str) -> dict:
    return {row[field]: row['n'] for row in qs.values(field).annotate(n=Count('id')).order_by()}


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_dashboard(request):
    now = timezone.now()
    active = Alert.objects.filter(status=Alert.STATUS_ACTIVE)
    return Response({
        'machines': {
            'total': Machine.objects.count(),
            'byStatus': _counts(Machine.objects.all(), 'status'),
        },
        'faults': {
            'total': Fault.objects.count(),
            'byStatus': _counts(Fault.objects.all(), 'status'),
        },
        'interventions': {
            'total': Intervention.objects.count(),
            'byStatus': _counts(Intervention.objects.all(), 'status'),
        },
        'alerts': {
            'active': active.count(),
            'byPriority': _counts(active, 'priority'),
        },
        'overdueControls': MaintenanceControl.objects.filter(next_control_date__lt=now).count(),
        'pendingSchedules': MaintenanceSchedule.objects.filter(status=MaintenanceSchedule.STATUS_PENDING).count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def technician_dashboard(request):
    """Active alerts, this week's schedules and overdue controls."""
    now = timezone.now()
    week = now + timedelta(days=7)
    alerts = (Alert.objects.select_related('machine')
              .filter(status=Alert.STATUS_ACTIVE).order_by('-timestamp')[:10])
    schedules = (MaintenanceSchedule.objects.select_related('machine')
                 .filter(status=MaintenanceSchedule.STATUS_PENDING, due_date__lte=week)
                 .order_by('due_date'))
    overdue = (MaintenanceControl.objects.select_related('machine', 'technician')
               .filter(next_control_date__lt=now).order_by('next_control_date'))
    mine = Intervention.objects.filter(technician_user=request.user)
    return Response({
        'activeAlerts': Alert.objects.filter(status=Alert.STATUS_ACTIVE).count(),
        'recentAlerts': [serialize_alert(a) for a in alerts],
        'dueSchedules': [serialize_schedule(s) for s in schedules],
        'overdueControls': [serialize_control(c) for c in overdue],
        'myInterventions': _counts(mine, 'status'),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_dashboard(request):
    faults = Fault.objects.select_related('machine', 'patient').filter(patient=request.user)
    return Response({
        'name': request.user.display_name,
        'patientId': request.user.patient_id,
        'faults': {
            'total': faults.count(),
            'byStatus': _counts(faults, 'status'),
        },
        'recentFaults': [serialize_fault(f) for f in faults.order_by('-date', '-id')[:5]],
    })
