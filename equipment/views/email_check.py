from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.permissions import IsAdminRole
from equipment.services.notifications import send_test_email


class EmailProbeSerializer(serializers.Serializer):
    email = serializers.EmailField()


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def test_email(request):
    """Send a test message through the configured provider."""
    s = EmailProbeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = send_test_email(s.validated_data['email'])
    return Response(result.as_dict(), status=200 if result.success else 502)
