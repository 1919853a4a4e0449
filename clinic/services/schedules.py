"""
Doctor schedule management.

A schedule is a half-open interval ``[start, end)``.  Two schedules of
the same doctor overlap iff ``existing.start < candidate.end`` and
``existing.end > candidate.start``; touching intervals do not overlap.

Start and end are stored in the clinic frame, like appointment
schedules, so ``doctors_on_duty`` and the day bounds compare against
them directly.  ``format_schedule`` converts them back to real instants.

The overlap check is a read followed by a write and is not isolated from
concurrent writers: two simultaneous requests for the same doctor can
both pass and both insert.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from clinic.exceptions import ScheduleConflict
from clinic.models import Doctor, Schedule
from clinic.services.periods import ReportingPeriod, iso, to_true_instant

logger = logging.getLogger(__name__)


def overlapping(owner_id, candidate_start: datetime, candidate_end: datetime,
                exclude_interval_id=None) -> QuerySet:
    qs = Schedule.objects.filter(doctor_id=owner_id, start__lt=candidate_end, end__gt=candidate_start)
    if exclude_interval_id is not None:
        qs = qs.exclude(pk=exclude_interval_id)
    return qs


def has_conflict(owner_id, candidate_start: datetime, candidate_end: datetime,
                 exclude_interval_id=None) -> bool:
    """Whether ``[candidate_start, candidate_end)`` collides with another schedule of the owner.

    Pass ``exclude_interval_id`` when re-validating an existing schedule so
    it is not compared with itself.
    """
    if candidate_end <= candidate_start:
        raise ValidationError({'end': 'End time must be after start time.'})
    return overlapping(owner_id, candidate_start, candidate_end, exclude_interval_id).exists()


def create_schedule(doctor: Doctor, start: datetime, end: datetime) -> Schedule:
    if has_conflict(doctor.id, start, end):
        logger.info('schedule conflict for doctor %s: %s ~ %s', doctor.id, start, end)
        raise ScheduleConflict('Schedule overlaps with an existing schedule.')
    return Schedule.objects.create(doctor=doctor, start=start, end=end)


def update_schedule(schedule: Schedule, *, doctor: Optional[Doctor] = None,
                    start: Optional[datetime] = None, end: Optional[datetime] = None) -> Schedule:
    new_doctor = doctor or schedule.doctor
    new_start = start or schedule.start
    new_end = end or schedule.end
    if has_conflict(new_doctor.id, new_start, new_end, exclude_interval_id=schedule.id):
        logger.info('schedule conflict updating %s for doctor %s', schedule.id, new_doctor.id)
        raise ScheduleConflict('Updated schedule overlaps with another schedule.')
    schedule.doctor = new_doctor
    schedule.start = new_start
    schedule.end = new_end
    schedule.save(update_fields=['doctor', 'start', 'end'])
    return schedule


def list_schedules(*, doctor_id=None, start_from: Optional[datetime] = None,
                   start_to: Optional[datetime] = None) -> QuerySet:
    qs = Schedule.objects.select_related('doctor')
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if start_from:
        qs = qs.filter(start__gte=start_from)
    if start_to:
        qs = qs.filter(start__lte=start_to)
    return qs.order_by('-start')


def schedules_within(period: ReportingPeriod, doctor_id=None) -> QuerySet:
    return list_schedules(doctor_id=doctor_id, start_from=period.start, start_to=period.end)


def doctors_on_duty(at: datetime) -> QuerySet:
    """Doctors with a schedule covering ``at``."""
    return Doctor.objects.filter(schedules__start__lte=at, schedules__end__gt=at).distinct().order_by('name')


def format_schedule(s: Schedule) -> dict:
    doctor = s.doctor
    return {
        'id': s.id,
        'doctorId': s.doctor_id,
        'doctor': {'id': doctor.id, 'name': doctor.name, 'specialization': doctor.specialization} if doctor else None,
        'start': iso(to_true_instant(s.start)),
        'end': iso(to_true_instant(s.end)),
        'createdAt': iso(s.created_at),
    }
