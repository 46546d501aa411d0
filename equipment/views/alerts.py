"""
Alert listing, manual creation and resolution.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.models import Alert, Machine
from equipment.permissions import IsStaffRole
from equipment.serializers.alerts import AlertCreateSerializer, AlertListQuerySerializer, AlertUpdateSerializer
from equipment.services.alerts import AlertDraft, emit_alert, resolve_alert, serialize_alert
from equipment.services.audit import log_action


@api_view(['GET', 'POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def alerts(request):
    if request.method == 'GET':
        q = AlertListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = Alert.objects.select_related('machine').order_by('-timestamp', '-id')
        if q.validated_data.get('role'):
            qs = qs.filter(message_role=q.validated_data['role'])
        if q.validated_data.get('status'):
            qs = qs.filter(status=q.validated_data['status'])
        if q.validated_data.get('machineId'):
            qs = qs.filter(machine_id=q.validated_data['machineId'])
        return Response([serialize_alert(a) for a in qs])

    if request.method == 'POST':
        s = AlertCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data
        machine = get_object_or_404(Machine, pk=v['machineId'])
        outcome = emit_alert(AlertDraft(
            machine=machine,
            message=v['message'],
            message_role=v.get('messageRole', ''),
            type=v['type'],
            required_action=v['requiredAction'],
            priority=v['priority'],
            timestamp=v.get('timestamp'),
        ))
        data = serialize_alert(outcome.alert)
        data['email'] = outcome.delivery.as_dict()
        return Response(data, status=status.HTTP_201_CREATED)

    s = AlertUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    alert = get_object_or_404(Alert.objects.select_related('machine'), pk=s.validated_data['id'])
    if s.validated_data['status'] == Alert.STATUS_RESOLVED:
        resolve_alert(alert)
        log_action(user=request.user, action='alert_resolve', obj=alert)
    elif alert.status != Alert.STATUS_ACTIVE:
        return Response({'error': 'A resolved alert cannot be reopened'}, status=400)
    return Response(serialize_alert(alert))
