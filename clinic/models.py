"""
Database models for the clinic backend.

These models capture the core concepts of the system: patient and admin
accounts, doctors and their on-duty schedules, the services the clinic
offers, appointments booked against those services and the medical
record files attached to appointments.
"""
from __future__ import annotations

import os
import uuid

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """Custom user model with a role and the patient demographic fields.

    Roles mirror the two front-ends: 'patient' for the booking portal and
    'admin' for the clinic staff dashboard.  The e-mail address is the
    login identifier and is also stored as ``username``.
    """
    ROLE_PATIENT = 'patient'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    email = models.EmailField(unique=True)
    birth_date = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    marital_status = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=32, blank=True)
    reset_code = models.CharField(max_length=8, blank=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Doctor(models.Model):
    name = models.CharField(max_length=255, unique=True)
    specialization = models.CharField(max_length=255, db_index=True)
    schedule = models.DateTimeField()
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"{self.name} ({self.specialization})"


class Schedule(models.Model):
    """An on-duty interval ``[start, end)`` for one doctor.

    Intervals of the same doctor never overlap; the check lives in
    :mod:`clinic.services.schedules` and runs on every create and update.
    """
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='schedules')
    start = models.DateTimeField()
    end = models.DateTimeField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'start', 'end'], name='clinic_sche_doctor__3f1a2b_idx'),
        ]

    def __str__(self) -> str:
        return f"Schedule(d={self.doctor_id}, {self.start:%F %T}~{self.end:%F %T})"


class Service(models.Model):
    STATUS_AVAILABLE = 'Available'
    STATUS_UNAVAILABLE = 'Unavailable'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_UNAVAILABLE, 'Unavailable'),
    ]
    name = models.CharField(max_length=255, unique=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)

    def __str__(self) -> str:
        return self.name


def _record_upload(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1]
    return f"medical-records/{timezone.now():%Y/%m}/{uuid.uuid4().hex}{ext}"


class MedicalRecord(models.Model):
    """A file attached to an appointment (lab result, referral, scan)."""
    appointment = models.ForeignKey(
        'Appointment', null=True, blank=True, on_delete=models.SET_NULL, related_name='records'
    )
    file = models.FileField(upload_to=_record_upload, max_length=512)
    filename = models.CharField(max_length=255)
    original_name = models.CharField(max_length=255)
    storage_path = models.CharField(max_length=512)
    file_url = models.CharField(max_length=1024)
    content_type = models.CharField(max_length=128, blank=True)
    size = models.PositiveIntegerField(default=0)
    uploaded_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"record {self.id} ({self.original_name})"


def validate_departments(value) -> None:
    if not isinstance(value, list) or not 1 <= len(value) <= 3:
        raise ValidationError('You must select between 1 and 3 departments')


class Appointment(models.Model):
    STATUS_PENDING = 'Pending'
    STATUS_APPROVED = 'Approved'
    STATUS_DECLINED = 'Declined'
    STATUS_COMPLETED = 'Completed'
    STATUS_NO_SHOW = 'No Show'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_DECLINED, 'Declined'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_NO_SHOW, 'No Show'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(
        Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    # Service names booked for this visit.
    medical_department = models.JSONField(default=list, validators=[validate_departments])
    medical_record = models.ForeignKey(
        MedicalRecord, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    email = models.EmailField()
    phone_number = models.CharField(max_length=32)
    # Clinic wall-clock reading stored in the UTC frame.
    schedule = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    is_archived = models.BooleanField(default=False)
    is_deleted = models.BooleanField(default=False)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'schedule'], name='clinic_appo_status_7c2d41_idx'),
            models.Index(fields=['patient', 'schedule'], name='clinic_appo_patient_9e8b10_idx'),
        ]

    def __str__(self) -> str:
        return f"appt {self.id} p={self.patient_id} {self.status} @ {self.schedule:%F %T}"
