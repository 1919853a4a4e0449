"""
Dashboard counts: period-over-period totals, completed-visit histograms,
today's status summary and the most booked services.
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Optional

from django.db.models import Count, QuerySet
from django.utils import timezone

from clinic.models import Appointment, Service, User
from clinic.services import periods


def _within(qs: QuerySet, field: str, start: datetime, end: datetime) -> QuerySet:
    return qs.filter(**{f'{field}__gte': start, f'{field}__lte': end})


def period_counts(qs: QuerySet, field: str, granularity: str,
                  reference: Optional[datetime] = None) -> dict:
    bounds = periods.compute_bounds(reference or timezone.now(), granularity)
    current = _within(qs, field, bounds.current_start, bounds.current_end).count()
    previous = _within(qs, field, bounds.previous_start, bounds.previous_end).count()
    return periods.period_summary(current, previous, granularity)


def appointment_counts(granularity: str, reference: Optional[datetime] = None) -> dict:
    qs = Appointment.objects.filter(is_deleted=False)
    return period_counts(qs, 'created_at', granularity, reference)


def patient_counts(granularity: str, reference: Optional[datetime] = None) -> dict:
    qs = User.objects.filter(role=User.ROLE_PATIENT)
    return period_counts(qs, 'date_joined', granularity, reference)


def _completed() -> QuerySet:
    return Appointment.objects.filter(is_deleted=False, status=Appointment.STATUS_COMPLETED)


def _services_availed(qs: QuerySet) -> int:
    return sum(len(depts or []) for depts in qs.values_list('medical_department', flat=True))


def services_counts(granularity: str, reference: Optional[datetime] = None) -> dict:
    bounds = periods.compute_bounds(reference or timezone.now(), granularity)
    current = _services_availed(_within(_completed(), 'schedule', bounds.current_start, bounds.current_end))
    previous = _services_availed(_within(_completed(), 'schedule', bounds.previous_start, bounds.previous_end))
    return periods.period_summary(current, previous, granularity)


def completed_histogram(granularity: str, reference: Optional[datetime] = None) -> dict:
    """Completed appointments bucketed by weekday, month or year.

    Schedules are already in the clinic frame, so no further shift is
    applied when bucketing.
    """
    reference = reference or timezone.now()
    if granularity == 'week':
        bounds = periods.compute_bounds(reference, 'week')
        values = _within(_completed(), 'schedule', bounds.current_start, bounds.current_end)
        return periods.weekday_histogram(values.values_list('schedule', flat=True))
    current_year = periods.shift(reference).year
    if granularity == 'month':
        bounds = periods.compute_bounds(reference, 'year')
        values = _within(_completed(), 'schedule', bounds.current_start, bounds.current_end)
        return periods.month_histogram(values.values_list('schedule', flat=True))
    span = periods.year_span(current_year)
    values = _within(_completed(), 'schedule', span.start, span.end)
    return periods.year_histogram(values.values_list('schedule', flat=True), current_year)


def today_summary(reference: Optional[datetime] = None) -> dict:
    day = periods.day_bounds(reference or timezone.now())
    rows = (
        _within(Appointment.objects.filter(is_deleted=False), 'schedule', day.start, day.end)
        .values('status')
        .annotate(n=Count('id'))
    )
    by_status = {row['status']: row['n'] for row in rows}
    return {
        'total': sum(by_status.values()),
        'pending': by_status.get(Appointment.STATUS_PENDING, 0),
        'approved': by_status.get(Appointment.STATUS_APPROVED, 0),
        'completed': by_status.get(Appointment.STATUS_COMPLETED, 0),
        'declined': by_status.get(Appointment.STATUS_DECLINED, 0),
        'cancelled': by_status.get(Appointment.STATUS_CANCELLED, 0),
        'noShow': by_status.get(Appointment.STATUS_NO_SHOW, 0),
        'date': periods.iso(day.start)[:10],
    }


def top_services(limit: int = 5) -> list[dict]:
    # Department lists are JSON arrays; counting them portably happens here
    # rather than in SQL.
    counter: Counter = Counter()
    for depts in _completed().values_list('medical_department', flat=True):
        counter.update(depts or [])
    prices = dict(Service.objects.filter(name__in=list(counter)).values_list('name', 'price'))
    return [
        {
            'name': name,
            'count': count,
            'price': float(prices[name]) if name in prices else None,
        }
        for name, count in counter.most_common(limit)
    ]
