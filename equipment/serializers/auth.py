from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    """``username`` may also be the account's email address."""
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField()

    def validate(self, attrs):
        account = (attrs.get('username') or attrs.get('email') or '').strip()
        if not account:
            raise serializers.ValidationError('Username or email is required')
        attrs['account'] = account
        return attrs
