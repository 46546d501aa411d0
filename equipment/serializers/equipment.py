from rest_framework import serializers

from . import clean_text


class MachineSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, max_length=64)
    name = serializers.CharField(max_length=255)
    inventoryNumber = serializers.CharField(max_length=64)
    department = serializers.CharField(max_length=255)
    status = serializers.CharField(required=False, max_length=32)
    lastMaintenance = serializers.DateTimeField(required=False, allow_null=True)
    nextMaintenance = serializers.DateTimeField(required=False, allow_null=True)

    def validate_name(self, v):
        return clean_text(v)

    def validate_department(self, v):
        return clean_text(v)

    def validate_inventoryNumber(self, v):
        return v.strip()


class FaultSerializer(serializers.Serializer):
    date = serializers.DateField()
    faultType = serializers.CharField(max_length=128)
    description = serializers.CharField()
    downtime = serializers.CharField(required=False, allow_blank=True, max_length=64)
    rootCause = serializers.CharField(required=False, allow_blank=True)
    correctiveAction = serializers.CharField(required=False, allow_blank=True)
    status = serializers.CharField(required=False, max_length=32)
    machineId = serializers.CharField(max_length=64)
    patientId = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate_description(self, v):
        return clean_text(v)

    def validate_rootCause(self, v):
        return clean_text(v)

    def validate_correctiveAction(self, v):
        return clean_text(v)
