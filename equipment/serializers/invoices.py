from decimal import Decimal

from rest_framework import serializers

from . import clean_text

FEE_FIELDS = ('dialysisFee', 'generatorDialyzer', 'medConsumables', 'nursingCare', 'adminFees')


def _money(**kw):
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), **kw)


class InvoiceSerializer(serializers.Serializer):
    patientName = serializers.CharField(max_length=255)
    medicalRecordNumber = serializers.CharField(max_length=64)
    sessionDate = serializers.DateField()
    sessionTimeFrom = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=16)
    sessionTimeTo = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=16)
    responsibleDoctor = serializers.CharField(max_length=255)
    dialysisFee = _money(default=Decimal('0'))
    generatorDialyzer = _money(default=Decimal('0'))
    medConsumables = _money(default=Decimal('0'))
    nursingCare = _money(default=Decimal('0'))
    adminFees = _money(default=Decimal('0'))
    taxPercentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'),
                                             max_value=Decimal('100'), default=Decimal('0'))
    paymentMethod = serializers.CharField(required=False, allow_blank=True, max_length=255)
    paymentReference = serializers.CharField(required=False, allow_blank=True, max_length=255)
    observations = serializers.CharField(required=False, allow_blank=True)
    subTotal = _money(required=False, allow_null=True)
    taxAmount = _money(required=False, allow_null=True)
    totalToPay = _money(required=False, allow_null=True)

    def validate_observations(self, v):
        return clean_text(v)

    def validate(self, attrs):
        cents = Decimal('0.01')
        if attrs.get('subTotal') is None:
            attrs['subTotal'] = sum((attrs[f] for f in FEE_FIELDS), Decimal('0')).quantize(cents)
        if attrs.get('taxAmount') is None:
            attrs['taxAmount'] = (attrs['subTotal'] * attrs['taxPercentage'] / 100).quantize(cents)
        if attrs.get('totalToPay') is None:
            attrs['totalToPay'] = attrs['subTotal'] + attrs['taxAmount']
        return attrs
