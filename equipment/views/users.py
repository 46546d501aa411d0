"""
User management endpoints (administrators only).
"""
from __future__ import annotations

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.auth_views import serialize_user
from equipment.models import User
from equipment.permissions import IsAdminRole
from equipment.serializers.users import UserCreateSerializer, UserUpdateSerializer
from equipment.services.audit import log_action

_CODE_FIELDS = (('patientId', 'patient_id'), ('technicianId', 'technician_id'), ('adminId', 'admin_id'))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def users(request):
    if request.method == 'GET':
        qs = User.objects.order_by('-date_joined')
        role = request.query_params.get('role')
        if role:
            qs = qs.filter(role=role)
        return Response([serialize_user(u) for u in qs])

    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    with transaction.atomic():
        user = User(username=v['email'], email=v['email'], first_name=v['name'], role=v['role'])
        for key, attr in _CODE_FIELDS:
            setattr(user, attr, v.get(key) or None)
        user.set_password(v['password'])
        user.save()
        log_action(user=request.user, action='user_create', obj=user, detail={'role': user.role})
    return Response(serialize_user(user), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk: int):
    user = get_object_or_404(User, pk=pk)
    if request.method == 'GET':
        return Response(serialize_user(user))
    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=400)
        log_action(user=request.user, action='user_delete', obj=user, detail={'username': user.username})
        user.delete()
        return Response({'message': 'User deleted successfully'})

    s = UserUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'name' in v:
        user.first_name = v['name']
    if 'email' in v:
        user.email = v['email']
    if 'role' in v:
        user.role = v['role']
    if v.get('password'):
        user.set_password(v['password'])
    user.save()
    return Response(serialize_user(user))
