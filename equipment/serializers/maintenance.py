from rest_framework import serializers

from equipment.models import MaintenanceControl, MaintenanceSchedule
from . import clean_text


class ScheduleSerializer(serializers.Serializer):
    machineId = serializers.CharField(max_length=64)
    type = serializers.CharField(max_length=64)
    tasks = serializers.ListField(child=serializers.CharField(), required=False)
    dueDate = serializers.DateTimeField()
    status = serializers.ChoiceField(required=False, choices=[s for s, _ in MaintenanceSchedule.STATUS_CHOICES])

    def validate_type(self, v):
        return v.strip()

    def validate_tasks(self, v):
        cleaned = (clean_text(t) for t in v)
        return [t for t in cleaned if t]


class ScheduleUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.ChoiceField(required=False, choices=[s for s, _ in MaintenanceSchedule.STATUS_CHOICES])
    dueDate = serializers.DateTimeField(required=False)
    tasks = serializers.ListField(child=serializers.CharField(), required=False)


class ControlSerializer(serializers.Serializer):
    machineId = serializers.CharField(max_length=64)
    technicianId = serializers.CharField(max_length=32)
    controlType = serializers.ChoiceField(choices=[t for t, _ in MaintenanceControl.TYPE_CHOICES])
    controlDate = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_notes(self, v):
        return clean_text(v)
