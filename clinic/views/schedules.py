from datetime import timedelta

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor, Schedule
from clinic.permissions import IsAdminOrReadOnly, IsAdminRole
from clinic.serializers.schedule import (
    ScheduleCreateSerializer,
    ScheduleListQuerySerializer,
    ScheduleUpdateSerializer,
    TodayScheduleQuerySerializer,
)
from clinic.services import schedules as svc
from clinic.services.pagination import paginate
from clinic.services.periods import day_bounds, parse_instant, shift

SCHEDULE_PAGE_SIZE = 15


def _doctor_or_404(pk) -> Doctor:
    doctor = Doctor.objects.filter(pk=pk).first()
    if not doctor:
        raise NotFound('Doctor not found')
    return doctor


def _schedule_or_404(pk) -> Schedule:
    schedule = Schedule.objects.select_related('doctor').filter(pk=pk).first()
    if not schedule:
        raise NotFound('Schedule not found')
    return schedule


def _bound(raw: str, field: str):
    """A list filter value in the clinic frame; bare dates already are."""
    if len(raw.strip()) <= 10:
        return parse_instant(raw, field), True
    return shift(parse_instant(raw, field)), False


def _list(request):
    q = ScheduleListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    start_from = _bound(vd['startDate'], 'startDate')[0] if vd.get('startDate') else None
    start_to = None
    if vd.get('endDate'):
        start_to, bare = _bound(vd['endDate'], 'endDate')
        if bare:
            # a bare date covers the whole day
            start_to += timedelta(days=1) - timedelta(milliseconds=1)
    qs = svc.list_schedules(doctor_id=vd.get('doctorId'), start_from=start_from, start_to=start_to)
    items, meta = paginate(qs, vd.get('page'), vd.get('pageSize'), SCHEDULE_PAGE_SIZE)
    return Response({'ok': True, 'data': [svc.format_schedule(s) for s in items], 'pagination': meta})


def _create(request):
    s = ScheduleCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    doctor = _doctor_or_404(vd['doctorId'])
    schedule = svc.create_schedule(doctor, shift(vd['start']), shift(vd['end']))
    return Response({'ok': True, 'data': svc.format_schedule(schedule)}, status=201)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def schedules(request):
    """GET lists schedules (doctorId, startDate, endDate, page, pageSize);
    POST creates one and answers 409 on overlap."""
    if request.method == 'POST':
        return _create(request)
    return _list(request)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def today(request):
    q = TodayScheduleQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = svc.schedules_within(day_bounds(timezone.now()), q.validated_data.get('doctorId'))
    return Response({'ok': True, 'data': [svc.format_schedule(s) for s in qs.order_by('start')]})


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def schedule_detail(request, pk: int):
    schedule = _schedule_or_404(pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': svc.format_schedule(schedule)})
    if request.method == 'DELETE':
        schedule.delete()
        return Response(status=204)
    s = ScheduleUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    doctor = _doctor_or_404(vd['doctorId']) if 'doctorId' in vd else None
    start = shift(vd['start']) if 'start' in vd else None
    end = shift(vd['end']) if 'end' in vd else None
    schedule = svc.update_schedule(schedule, doctor=doctor, start=start, end=end)
    return Response({'ok': True, 'data': svc.format_schedule(schedule)})
