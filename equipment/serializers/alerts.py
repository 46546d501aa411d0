from rest_framework import serializers

from equipment.models import Alert
from . import clean_text


class AlertCreateSerializer(serializers.Serializer):
    message = serializers.CharField()
    messageRole = serializers.CharField(required=False, allow_blank=True, max_length=32)
    type = serializers.CharField(max_length=128)
    requiredAction = serializers.CharField()
    priority = serializers.ChoiceField(choices=[p for p, _ in Alert.PRIORITY_CHOICES])
    machineId = serializers.CharField(max_length=64)
    timestamp = serializers.DateTimeField(required=False)

    def validate_message(self, v):
        return clean_text(v)

    def validate_requiredAction(self, v):
        return clean_text(v)


class AlertUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=[s for s, _ in Alert.STATUS_CHOICES])


class AlertListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(required=False, choices=[s for s, _ in Alert.STATUS_CHOICES])
    role = serializers.CharField(required=False, max_length=32)
    machineId = serializers.CharField(required=False, max_length=64)
