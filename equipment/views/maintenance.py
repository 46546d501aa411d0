"""
Maintenance schedules and maintenance controls.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.models import Machine, MaintenanceControl, MaintenanceSchedule, User
from equipment.permissions import IsStaffRole
from equipment.serializers.maintenance import ControlSerializer, ScheduleSerializer, ScheduleUpdateSerializer
from equipment.services.maintenance import create_maintenance_control


def _machine_summary(m: Machine) -> dict:
    return {'name': m.name, 'inventoryNumber': m.inventory_number, 'department': m.department}


def serialize_schedule(s: MaintenanceSchedule) -> dict:
    return {
        'id': s.id,
        'machineId': s.machine_id,
        'machine': _machine_summary(s.machine),
        'type': s.type,
        'tasks': s.tasks,
        'dueDate': s.due_date.isoformat(),
        'status': s.status,
        'completedAt': s.completed_at.isoformat() if s.completed_at else None,
    }


def serialize_control(c: MaintenanceControl) -> dict:
    tech = c.technician
    return {
        'id': c.id,
        'machineId': c.machine_id,
        'machine': _machine_summary(c.machine),
        'technicianId': tech.technician_id if tech else None,
        'technician': {'name': tech.display_name, 'email': tech.email} if tech else None,
        'controlType': c.control_type,
        'controlDate': c.control_date.isoformat(),
        'nextControlDate': c.next_control_date.isoformat(),
        'status': c.status,
        'notes': c.notes,
        'isOverdue': c.next_control_date < timezone.now(),
    }


@api_view(['GET', 'POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def schedules(request):
    if request.method == 'GET':
        qs = MaintenanceSchedule.objects.select_related('machine').order_by('due_date')
        state = request.query_params.get('status')
        if state:
            qs = qs.filter(status=state)
        return Response([serialize_schedule(s) for s in qs])

    if request.method == 'POST':
        s = ScheduleSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data
        machine = get_object_or_404(Machine, pk=v['machineId'])
        schedule = MaintenanceSchedule.objects.create(
            machine=machine,
            type=v['type'],
            tasks=v.get('tasks', []),
            due_date=v['dueDate'],
            status=v.get('status') or MaintenanceSchedule.STATUS_PENDING,
        )
        return Response(serialize_schedule(schedule), status=status.HTTP_201_CREATED)

    s = ScheduleUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    schedule = get_object_or_404(MaintenanceSchedule.objects.select_related('machine'), pk=v['id'])
    if 'dueDate' in v:
        schedule.due_date = v['dueDate']
    if 'tasks' in v:
        schedule.tasks = v['tasks']
    if 'status' in v:
        schedule.status = v['status']
        schedule.completed_at = timezone.now() if v['status'] == MaintenanceSchedule.STATUS_COMPLETED else None
    schedule.save()
    return Response(serialize_schedule(schedule))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def controls(request):
    if request.method == 'GET':
        qs = MaintenanceControl.objects.select_related('machine', 'technician').order_by('next_control_date')
        machine_id = request.query_params.get('machineId')
        if machine_id:
            qs = qs.filter(machine_id=machine_id)
        return Response([serialize_control(c) for c in qs])

    s = ControlSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    machine = get_object_or_404(Machine, pk=v['machineId'])
    technician = User.objects.filter(technician_id=v['technicianId']).first()
    if technician is None:
        return Response({'error': 'Technician not found'}, status=404)
    control, delivery = create_maintenance_control(
        machine=machine,
        technician=technician,
        control_type=v['controlType'],
        control_date=v['controlDate'],
        notes=v.get('notes', ''),
    )
    data = serialize_control(control)
    data['email'] = delivery.as_dict()
    return Response(data, status=status.HTTP_201_CREATED)
