from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from equipment.models import Invoice
from equipment.permissions import IsAdminRole
from equipment.serializers.invoices import InvoiceSerializer

_FIELDS = (
    ('patientName', 'patient_name'),
    ('medicalRecordNumber', 'medical_record_number'),
    ('sessionDate', 'session_date'),
    ('sessionTimeFrom', 'session_time_from'),
    ('sessionTimeTo', 'session_time_to'),
    ('responsibleDoctor', 'responsible_doctor'),
    ('dialysisFee', 'dialysis_fee'),
    ('generatorDialyzer', 'generator_dialyzer'),
    ('medConsumables', 'med_consumables'),
    ('nursingCare', 'nursing_care'),
    ('adminFees', 'admin_fees'),
    ('taxPercentage', 'tax_percentage'),
    ('paymentMethod', 'payment_method'),
    ('paymentReference', 'payment_reference'),
    ('observations', 'observations'),
    ('subTotal', 'sub_total'),
    ('taxAmount', 'tax_amount'),
    ('totalToPay', 'total_to_pay'),
)


def serialize_invoice(inv: Invoice) -> dict:
    data = {key: getattr(inv, attr) for key, attr in _FIELDS}
    for key, value in data.items():
        if hasattr(value, 'quantize'):
            data[key] = str(value)
    data['sessionDate'] = inv.session_date.isoformat()
    data['id'] = inv.id
    data['createdAt'] = inv.created_at.isoformat()
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def invoices(request):
    """Dialysis session bills; totals are computed when not supplied."""
    if request.method == 'GET':
        return Response([serialize_invoice(i) for i in Invoice.objects.order_by('-session_date', '-id')])

    s = InvoiceSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    invoice = Invoice.objects.create(**{attr: v[key] for key, attr in _FIELDS if v.get(key) is not None})
    return Response(serialize_invoice(invoice), status=status.HTTP_201_CREATED)
