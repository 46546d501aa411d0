from rest_framework import serializers

from equipment.models import Intervention
from . import clean_text

TEXT_FIELDS = ('problemDescription', 'tasksCompleted', 'partDescription')


class InterventionSerializer(serializers.Serializer):
    requestDate = serializers.DateField()
    requestedIntervention = serializers.CharField(max_length=255)
    arrivalAtWorkshop = serializers.DateField(required=False, allow_null=True)
    department = serializers.CharField(max_length=255)
    requestedBy = serializers.CharField(max_length=255)
    returnToService = serializers.DateField(required=False, allow_null=True)
    equipmentDescription = serializers.CharField(max_length=255)
    inventoryNumber = serializers.CharField(required=False, allow_blank=True, max_length=64)
    problemDescription = serializers.CharField(required=False, allow_blank=True)
    interventionType = serializers.CharField(required=False, max_length=64)
    datePerformed = serializers.DateTimeField(required=False, allow_null=True)
    tasksCompleted = serializers.CharField(required=False, allow_blank=True)
    partsReplaced = serializers.CharField(required=False, allow_blank=True, max_length=255)
    partDescription = serializers.CharField(required=False, allow_blank=True)
    price = serializers.CharField(required=False, allow_blank=True, max_length=64)
    technician = serializers.CharField(required=False, allow_blank=True, max_length=255)
    timeSpent = serializers.CharField(required=False, allow_blank=True, max_length=64)
    status = serializers.ChoiceField(required=False, choices=[s for s, _ in Intervention.STATUS_CHOICES])
    technicianId = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notifications = serializers.ChoiceField(
        required=False, allow_null=True, allow_blank=True,
        choices=[n for n, _ in Intervention.NOTIFICATION_CHOICES],
    )

    def validate(self, attrs):
        for name in TEXT_FIELDS:
            if name in attrs:
                attrs[name] = clean_text(attrs[name])
        if attrs.get('notifications') == '':
            attrs['notifications'] = None
        return attrs
