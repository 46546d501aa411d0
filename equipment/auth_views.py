"""
Authentication views.

Login accepts a username or the account's email address and returns
both a DRF token (used by the dashboards) and a JWT pair.  The views live
apart from ``equipment.authentication`` so that the settings module can
load the authentication class without importing view code.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from equipment.serializers.auth import LoginSerializer
from equipment.services.audit import log_action

from .models import User

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.display_name,
        'email': user.email,
        'role': user.role,
        'patientId': user.patient_id,
        'technicianId': user.technician_id,
        'adminId': user.admin_id,
    }


def _resolve_username(account: str) -> str:
    if '@' in account:
        match = User.objects.filter(email__iexact=account).only('username').first()
        if match:
            return match.username
    return account


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = s.validated_data['account']
    ip = request.META.get('REMOTE_ADDR')

    user = authenticate(request, username=_resolve_username(account), password=s.validated_data['password'])
    if not user:
        logger.info("failed login for %r from %s", account, ip)
        log_action(user=None, action='login', object_type='User',
                   detail={'result': 'fail', 'account': account, 'ip': ip})
        return Response({'error': 'Invalid credentials'}, status=401)

    log_action(user=user, action='login', obj=user, detail={'result': 'ok', 'ip': ip})
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': serialize_user(user),
    })

login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    resp = TokenRefreshView.as_view()(request._request)
    data = dict(resp.data)
    if 'access' in data:
        data['jwt_access'] = data.pop('access')
    return Response(data, status=resp.status_code)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(serialize_user(request.user))
