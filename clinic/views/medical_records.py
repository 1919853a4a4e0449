"""
Medical record files attached to appointments.

Uploads go through ``default_storage`` (local ``MEDIA_ROOT`` unless
``STORAGES`` says otherwise); the appointment keeps a pointer to its
latest record.
"""
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import MedicalRecord
from clinic.permissions import IsAdminRole, is_admin
from clinic.serializers.medical_record import (
    RecordListQuerySerializer,
    RecordUpdateSerializer,
    RecordUploadSerializer,
)
from clinic.services import records as svc
from clinic.services.appointments import get_appointment_or_404


def _own_appointment(request, appointment_id):
    appt = get_appointment_or_404(appointment_id)
    if not is_admin(request.user) and appt.patient_id != request.user.id:
        raise NotFound('Appointment not found')
    return appt


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload(request):
    s = RecordUploadSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = _own_appointment(request, s.validated_data['appointmentId'])
    record = svc.upload_record(appt, s.validated_data['file'])
    return Response({'ok': True, 'data': svc.format_record(record)}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_records(request):
    q = RecordListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = MedicalRecord.objects.order_by('-uploaded_at', '-id')
    if not is_admin(request.user):
        qs = qs.filter(appointment__patient=request.user)
    if q.validated_data.get('appointmentId'):
        qs = qs.filter(appointment_id=q.validated_data['appointmentId'])
    return Response({'ok': True, 'data': [svc.format_record(r) for r in qs]})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def record_detail(request, pk: int):
    record = svc.get_record_or_404(pk)
    owner_id = record.appointment.patient_id if record.appointment else None
    if not is_admin(request.user) and owner_id != request.user.id:
        raise NotFound('Medical record not found')
    if request.method == 'GET':
        return Response({'ok': True, 'data': svc.format_record(record)})
    s = RecordUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if 'appointmentId' in vd and vd['appointmentId'] != record.appointment_id:
        record.appointment = _own_appointment(request, vd['appointmentId'])
        record.save(update_fields=['appointment'])
    if 'file' in vd:
        record = svc.replace_file(record, vd['file'])
    return Response({'ok': True, 'data': svc.format_record(record)})


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def delete_record(request, record_id: int, appointment_id: int):
    appt = get_appointment_or_404(appointment_id)
    svc.delete_record(appt, record_id)
    return Response(status=204)
