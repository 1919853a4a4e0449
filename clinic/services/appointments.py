"""
Appointment queries and state changes.

Filtering (status, clinic day, booked service, patient name) is applied
to the queryset before pagination so pages are never short because of a
filter that ran afterwards.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Appointment, Doctor, User
from clinic.permissions import is_admin
from clinic.serializers.appointment import ACTIONS
from clinic.services.periods import day_bounds, iso, parse_instant, parse_wall_clock, to_true_instant
from clinic.services.schedules import doctors_on_duty

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (Appointment.STATUS_PENDING,)
CANCELLABLE_STATUSES = (Appointment.STATUS_PENDING, Appointment.STATUS_APPROVED)


def active() -> QuerySet:
    return Appointment.objects.filter(is_deleted=False).select_related('patient', 'doctor', 'medical_record')


def get_appointment_or_404(pk, *, include_deleted: bool = False) -> Appointment:
    qs = Appointment.objects.select_related('patient', 'doctor', 'medical_record')
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    appt = qs.filter(pk=pk).first()
    if not appt:
        raise NotFound('Appointment not found')
    return appt


def apply_filters(qs: QuerySet, *, status: Optional[str] = None, date=None,
                  services: Optional[Iterable[str]] = None, q: Optional[str] = None) -> QuerySet:
    if status:
        qs = qs.filter(status=status)
    if date:
        day = day_bounds(parse_instant(date))
        qs = qs.filter(schedule__gte=day.start, schedule__lte=day.end)
    services = [s for s in (services or []) if s]
    if services:
        match = Q()
        for name in services:
            match |= Q(medical_department__icontains=name)
        qs = qs.filter(match)
    for term in (q or '').split():
        qs = qs.filter(
            Q(patient__first_name__icontains=term)
            | Q(patient__last_name__icontains=term)
            | Q(email__icontains=term)
        )
    return qs


def on_day(qs: QuerySet, reference: Optional[datetime] = None) -> QuerySet:
    day = day_bounds(reference or timezone.now())
    return qs.filter(schedule__gte=day.start, schedule__lte=day.end)


def create_appointment(patient: User, data: dict) -> Appointment:
    schedule = parse_wall_clock(data['date'], data['time'])
    appt = Appointment.objects.create(
        patient=patient,
        medical_department=list(data['medicalDepartment']),
        schedule=schedule,
        email=data['email'],
        phone_number=data['phoneNumber'],
    )
    logger.info('appointment %s booked by user %s', appt.id, patient.id)
    return appt


def _ensure_access(user: User, appt: Appointment) -> None:
    if not is_admin(user) and appt.patient_id != user.id:
        raise NotFound('Appointment not found')


def edit_appointment(user: User, appt: Appointment, data: dict) -> Appointment:
    _ensure_access(user, appt)
    if data.get('status') == Appointment.STATUS_CANCELLED:
        if appt.status not in CANCELLABLE_STATUSES:
            raise ValidationError({'status': f'Cannot cancel an appointment that is {appt.status}'})
        appt.status = Appointment.STATUS_CANCELLED
        appt.save(update_fields=['status'])
        return appt
    if appt.status not in EDITABLE_STATUSES:
        raise ValidationError({'status': 'Only pending appointments can be changed'})
    if 'date' in data:
        appt.schedule = parse_wall_clock(data['date'], data['time'])
    if 'medicalDepartment' in data:
        appt.medical_department = list(data['medicalDepartment'])
    if 'email' in data:
        appt.email = data['email']
    if 'phoneNumber' in data:
        appt.phone_number = data['phoneNumber']
    appt.save()
    return appt


def delete_appointment(user: User, appt: Appointment, *, hard: bool = False) -> None:
    _ensure_access(user, appt)
    if hard:
        appt.delete()
    else:
        appt.is_deleted = True
        appt.save(update_fields=['is_deleted'])


def set_status(appt: Appointment, action: str) -> Appointment:
    new_status = ACTIONS.get(action)
    if not new_status:
        raise ValidationError({'action': 'Invalid action'})
    appt.status = new_status
    appt.save(update_fields=['status'])
    logger.info('appointment %s -> %s', appt.id, new_status)
    return appt


def toggle_archive(appt: Appointment) -> Appointment:
    appt.is_archived = not appt.is_archived
    appt.save(update_fields=['is_archived'])
    return appt


def available_doctors(appt: Appointment) -> QuerySet:
    return doctors_on_duty(appt.schedule)


@transaction.atomic
def assign_doctor(appt: Appointment, doctor_id: Optional[int], *, force: bool = False) -> Appointment:
    if doctor_id is None:
        appt.doctor = None
    else:
        doctor = Doctor.objects.filter(pk=doctor_id).first()
        if not doctor:
            raise NotFound('Doctor not found')
        if not force and not available_doctors(appt).filter(pk=doctor.pk).exists():
            raise ValidationError({'doctorId': 'Doctor is not on duty at the appointment time'})
        appt.doctor = doctor
    appt.save(update_fields=['doctor'])
    return appt


def format_appointment(a: Appointment) -> dict:
    patient = a.patient
    record = a.medical_record
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'patientName': patient.full_name if patient else None,
        'doctorId': a.doctor_id,
        'doctorName': a.doctor.name if a.doctor else None,
        'medicalDepartment': list(a.medical_department or []),
        'medicalRecord': {'id': record.id, 'originalName': record.original_name, 'fileUrl': record.file_url} if record else None,
        'email': a.email,
        'phoneNumber': a.phone_number,
        # stored as clinic wall clock; clients get the real instant
        'schedule': iso(to_true_instant(a.schedule)),
        'status': a.status,
        'isArchived': a.is_archived,
        'createdAt': iso(a.created_at),
    }
