from rest_framework import serializers

from equipment.models import User
from . import clean_text


class UserCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES])
    patientId = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    technicianId = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    adminId = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('A user with this email already exists')
        return v


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=150)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(required=False, min_length=6, write_only=True)
    role = serializers.ChoiceField(required=False, choices=[r for r, _ in User.ROLE_CHOICES])

    def validate_name(self, v):
        return clean_text(v)
