"""
Appointment endpoints.

Patients book, edit, cancel and delete their own appointments; admins
work the queues (pending, today's approved, cancelled, archive), assign
doctors and move appointments through their statuses.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Appointment
from clinic.permissions import IsAdminRole, IsPatientRole
from clinic.serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentEditSerializer,
    AppointmentListQuerySerializer,
    AssignDoctorSerializer,
)
from clinic.serializers.common import PageQuerySerializer, PeriodQuerySerializer
from clinic.services import appointments as svc
from clinic.services import reports
from clinic.services.doctors import format_doctor
from clinic.services.pagination import paginate


def _page(request, qs, serializer_class=PageQuerySerializer, filtered: bool = False):
    q = serializer_class(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    if filtered:
        qs = svc.apply_filters(
            qs,
            status=vd.get('status'),
            date=vd.get('date'),
            services=vd.get('service'),
            q=vd.get('q'),
        )
    items, meta = paginate(qs, vd.get('page'), vd.get('pageSize'))
    return Response({'ok': True, 'data': [svc.format_appointment(a) for a in items], 'pagination': meta})


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

@api_view(['GET'])
@permission_classes([IsAdminRole])
def completed_histogram(request, granularity: str):
    q = PeriodQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': reports.completed_histogram(granularity, q.validated_data.get('at'))})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def today_counts(request):
    return Response({'ok': True, 'data': reports.today_summary()})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def appointment_counts(request, granularity: str):
    q = PeriodQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': reports.appointment_counts(granularity, q.validated_data.get('at'))})


# ---------------------------------------------------------------------------
# Admin queues
# ---------------------------------------------------------------------------

@api_view(['GET'])
@permission_classes([IsAdminRole])
def today_approved(request):
    qs = svc.on_day(svc.active().filter(status=Appointment.STATUS_APPROVED, is_archived=False))
    return _page(request, qs.order_by('schedule', 'id'))


@api_view(['GET'])
@permission_classes([IsAdminRole])
def cancelled(request):
    qs = svc.active().filter(
        status__in=[Appointment.STATUS_CANCELLED, Appointment.STATUS_NO_SHOW],
        is_archived=False,
    )
    return _page(request, qs.order_by('-schedule', '-id'))


@api_view(['GET'])
@permission_classes([IsAdminRole])
def pending(request):
    """Pending appointments, earliest first.
    Query params:
      - date: YYYY-MM-DD clinic day
      - service: repeatable, booked service name
      - page, pageSize
    """
    qs = svc.active().filter(status=Appointment.STATUS_PENDING, is_archived=False).order_by('schedule', 'id')
    return _page(request, qs, AppointmentListQuerySerializer, filtered=True)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def archived(request):
    qs = svc.active().filter(is_archived=True).order_by('-schedule', '-id')
    return _page(request, qs, AppointmentListQuerySerializer, filtered=True)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def all_appointments(request):
    qs = svc.active().order_by('-schedule', '-id')
    return _page(request, qs, AppointmentListQuerySerializer, filtered=True)


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_today(request):
    qs = svc.on_day(svc.active().filter(patient=request.user)).order_by('schedule', 'id')
    return _page(request, qs)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_appointments(request):
    qs = svc.active().filter(patient=request.user).order_by('schedule', 'id')
    return _page(request, qs, AppointmentListQuerySerializer, filtered=True)


@api_view(['POST'])
@permission_classes([IsPatientRole])
def create_appointment(request):
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = svc.create_appointment(request.user, s.validated_data)
    return Response({'ok': True, 'data': svc.format_appointment(appt)}, status=201)


# ---------------------------------------------------------------------------
# Single appointment
# ---------------------------------------------------------------------------

@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def toggle_archive(request, pk: int):
    appt = svc.toggle_archive(svc.get_appointment_or_404(pk))
    return Response({'ok': True, 'data': svc.format_appointment(appt)})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def doctors_available(request, pk: int):
    appt = svc.get_appointment_or_404(pk)
    return Response({'ok': True, 'data': [format_doctor(d) for d in svc.available_doctors(appt)]})


@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def assign_doctor(request, pk: int):
    appt = svc.get_appointment_or_404(pk)
    s = AssignDoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = svc.assign_doctor(appt, s.validated_data['doctorId'], force=s.validated_data['force'])
    return Response({'ok': True, 'data': svc.format_appointment(appt)})


@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def change_status(request, pk: int, action: str):
    """approve | decline | completed | noshow"""
    appt = svc.set_status(svc.get_appointment_or_404(pk), action)
    return Response({'ok': True, 'data': svc.format_appointment(appt)})


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk: int):
    appt = svc.get_appointment_or_404(pk)
    if request.method == 'DELETE':
        hard = (request.query_params.get('hard') or '').lower() in ('1', 'true')
        svc.delete_appointment(request.user, appt, hard=hard)
        return Response(status=204)
    s = AppointmentEditSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    appt = svc.edit_appointment(request.user, appt, s.validated_data)
    return Response({'ok': True, 'data': svc.format_appointment(appt)})
