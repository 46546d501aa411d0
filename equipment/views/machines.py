"""
Machine inventory endpoints.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.models import Machine
from equipment.permissions import IsAdminRole, StaffOrReadOnly
from equipment.serializers.equipment import MachineSerializer
from equipment.services.audit import log_action
from equipment.services.machines import MachineInUse, delete_machine

_FIELDS = (
    ('name', 'name'),
    ('inventoryNumber', 'inventory_number'),
    ('department', 'department'),
    ('status', 'status'),
    ('lastMaintenance', 'last_maintenance'),
    ('nextMaintenance', 'next_maintenance'),
)


def serialize_machine(m: Machine) -> dict:
    return {
        'id': m.id,
        'name': m.name,
        'inventoryNumber': m.inventory_number,
        'department': m.department,
        'status': m.status,
        'lastMaintenance': m.last_maintenance.isoformat() if m.last_maintenance else None,
        'nextMaintenance': m.next_maintenance.isoformat() if m.next_maintenance else None,
        'createdAt': m.created_at.isoformat(),
        'updatedAt': m.updated_at.isoformat(),
    }


def _inventory_taken(number: str, exclude_pk=None) -> bool:
    qs = Machine.objects.filter(inventory_number=number)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, StaffOrReadOnly])
def machines(request):
    if request.method == 'GET':
        return Response([serialize_machine(m) for m in Machine.objects.order_by('name')])

    s = MachineSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if _inventory_taken(v['inventoryNumber']):
        return Response({'error': 'A machine with this inventory number already exists'}, status=400)
    machine = Machine(**{attr: v[key] for key, attr in _FIELDS if key in v})
    if v.get('id'):
        machine.id = v['id']
    machine.save(force_insert=True)
    return Response(serialize_machine(machine), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, StaffOrReadOnly])
def machine_detail(request, machine_id: str):
    machine = get_object_or_404(Machine, pk=machine_id)
    if request.method == 'GET':
        return Response(serialize_machine(machine))

    if request.method == 'PATCH':
        s = MachineSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        v = s.validated_data
        number = v.get('inventoryNumber')
        if number and number != machine.inventory_number and _inventory_taken(number, machine.pk):
            return Response({'error': 'A machine with this inventory number already exists'}, status=400)
        for key, attr in _FIELDS:
            if key in v:
                setattr(machine, attr, v[key])
        machine.save()
        return Response(serialize_machine(machine))

    if not IsAdminRole().has_permission(request, None):
        return Response({'error': 'Only administrators can delete machines'}, status=403)
    force = request.query_params.get('force') == 'true'
    snapshot = {'id': machine.pk, 'name': machine.name, 'inventoryNumber': machine.inventory_number}
    try:
        counts = delete_machine(machine, force=force)
    except MachineInUse as e:
        return Response({
            'error': str(e),
            'details': {
                'faults': e.counts['faults'],
                'alerts': e.counts['alerts'],
                'maintenanceSchedule': e.counts['maintenance_schedules'],
                'maintenanceControls': e.counts['maintenance_controls'],
            },
            'canForceDelete': True,
        }, status=400)
    log_action(user=request.user, action='machine_delete', object_type='Machine', object_id=snapshot['id'],
               detail={'force': force, **counts})
    message = (f'Machine "{snapshot["name"]}" and all related data deleted successfully'
               if force else 'Machine deleted successfully')
    return Response({
        'message': message,
        'deletedMachine': snapshot,
        'forceDeleted': force,
        'deletedData': {
            'faults': counts['faults'],
            'alerts': counts['alerts'],
            'maintenanceSchedule': counts['maintenance_schedules'],
            'maintenanceControls': counts['maintenance_controls'],
        } if force else None,
    })
