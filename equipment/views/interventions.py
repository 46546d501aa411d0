"""
Technician interventions.

Saving an intervention that names a notification cycle and a date
performed also seeds the machine's control and schedule for that
cycle.  Those follow-up writes run after the intervention is stored and
cannot undo it.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.models import Intervention, User
from equipment.permissions import IsStaffRole
from equipment.serializers.interventions import InterventionSerializer
from equipment.services.maintenance import after_intervention_saved

_FIELDS = (
    ('requestDate', 'request_date'),
    ('requestedIntervention', 'requested_intervention'),
    ('arrivalAtWorkshop', 'arrival_at_workshop'),
    ('department', 'department'),
    ('requestedBy', 'requested_by'),
    ('returnToService', 'return_to_service'),
    ('equipmentDescription', 'equipment_description'),
    ('inventoryNumber', 'inventory_number'),
    ('problemDescription', 'problem_description'),
    ('interventionType', 'intervention_type'),
    ('datePerformed', 'date_performed'),
    ('tasksCompleted', 'tasks_completed'),
    ('partsReplaced', 'parts_replaced'),
    ('partDescription', 'part_description'),
    ('price', 'price'),
    ('technician', 'technician'),
    ('timeSpent', 'time_spent'),
    ('status', 'status'),
    ('notifications', 'notifications'),
)


def _iso(value):
    return value.isoformat() if value else None


def serialize_intervention(i: Intervention) -> dict:
    data = {key: getattr(i, attr) for key, attr in _FIELDS}
    for key in ('requestDate', 'arrivalAtWorkshop', 'returnToService', 'datePerformed'):
        data[key] = _iso(data[key])
    tech = i.technician_user
    data.update({
        'id': i.id,
        'technicianId': tech.technician_id if tech else None,
        'technicianUser': {'name': tech.display_name, 'technicianId': tech.technician_id} if tech else None,
        'createdAt': _iso(i.created_at),
        'updatedAt': _iso(i.updated_at),
    })
    return data


# Fields that decide which cycle an intervention seeds, and from when.
def _cycle_fields(intervention: Intervention) -> tuple:
    return intervention.date_performed, intervention.notifications, intervention.inventory_number


def _apply(intervention: Intervention, v: dict) -> None:
    for key, attr in _FIELDS:
        if key in v:
            setattr(intervention, attr, v[key])
    if 'technicianId' in v:
        code = v['technicianId']
        intervention.technician_user = User.objects.filter(technician_id=code).first() if code else None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def interventions(request):
    if request.method == 'GET':
        qs = Intervention.objects.select_related('technician_user').order_by('-created_at')
        technician_id = request.query_params.get('technicianId')
        if technician_id:
            qs = qs.filter(technician_user__technician_id=technician_id)
        return Response([serialize_intervention(i) for i in qs])

    s = InterventionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    intervention = Intervention()
    _apply(intervention, s.validated_data)
    intervention.save()
    after_intervention_saved(intervention, created=True)
    return Response(serialize_intervention(intervention), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def intervention_detail(request, pk: int):
    intervention = get_object_or_404(Intervention.objects.select_related('technician_user'), pk=pk)
    if request.method == 'GET':
        return Response(serialize_intervention(intervention))
    if request.method == 'DELETE':
        intervention.delete()
        return Response({'message': 'Intervention deleted successfully'})

    s = InterventionSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    before = _cycle_fields(intervention)
    _apply(intervention, s.validated_data)
    intervention.save()
    after_intervention_saved(intervention, created=False, resync=_cycle_fields(intervention) != before)
    return Response(serialize_intervention(intervention))
