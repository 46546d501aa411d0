"""
Fault reports.

Patients report faults observed during their sessions and see only
their own reports; staff see and update all of them.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.models import Fault, Machine, User
from equipment.permissions import IsStaffRole, STAFF_ROLES
from equipment.serializers.equipment import FaultSerializer


def serialize_fault(f: Fault) -> dict:
    return {
        'id': f.id,
        'date': f.date.isoformat(),
        'faultType': f.fault_type,
        'description': f.description,
        'downtime': f.downtime,
        'rootCause': f.root_cause,
        'correctiveAction': f.corrective_action,
        'status': f.status,
        'machineId': f.machine_id,
        'machine': {'name': f.machine.name, 'inventoryNumber': f.machine.inventory_number},
        'patientId': f.patient.patient_id if f.patient else None,
        'patientName': f.patient.display_name if f.patient else None,
        'createdAt': f.created_at.isoformat(),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def faults(request):
    user = request.user
    if request.method == 'GET':
        qs = Fault.objects.select_related('machine', 'patient').order_by('-date', '-id')
        if user.role not in STAFF_ROLES:
            qs = qs.filter(patient=user)
        return Response([serialize_fault(f) for f in qs])

    s = FaultSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    machine = get_object_or_404(Machine, pk=v['machineId'])
    if user.role in STAFF_ROLES:
        patient = User.objects.filter(patient_id=v['patientId']).first() if v.get('patientId') else None
    else:
        patient = user
    fault = Fault.objects.create(
        date=v['date'],
        fault_type=v['faultType'],
        description=v['description'],
        downtime=v.get('downtime', ''),
        root_cause=v.get('rootCause', ''),
        corrective_action=v.get('correctiveAction', ''),
        status=v.get('status') or 'Pending',
        machine=machine,
        patient=patient,
    )
    return Response(serialize_fault(fault), status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def fault_detail(request, pk: int):
    fault = get_object_or_404(Fault.objects.select_related('machine', 'patient'), pk=pk)
    s = FaultSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    for key, attr in (('status', 'status'), ('rootCause', 'root_cause'),
                      ('correctiveAction', 'corrective_action'), ('downtime', 'downtime')):
        if key in v:
            setattr(fault, attr, v[key])
    fault.save()
    return Response(serialize_fault(fault))
