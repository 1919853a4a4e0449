from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.utils import timezone

from clinic.models import Appointment, Service, User
from clinic.services.periods import parse_wall_clock, shift

from .conftest import make_user

pytestmark = pytest.mark.django_db

# Friday 2024-03-15 02:00 in the clinic; week is Sun 03-10 .. Sat 03-16
AT = '2024-03-14T18:00:00Z'


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


def appt(patient, *, schedule=None, created_at=None, status=Appointment.STATUS_PENDING, departments=None):
    return Appointment.objects.create(
        patient=patient,
        medical_department=departments or ['General Consultation'],
        email=patient.email,
        phone_number='09170000001',
        schedule=schedule or utc(2024, 3, 12, 9),
        created_at=created_at or timezone.now(),
        status=status,
    )


def test_appointment_counts_week(admin_client, patient):
    for day in (10, 12, 16):
        appt(patient, created_at=utc(2024, 3, day, 12))
    for day in (3, 9):
        appt(patient, created_at=utc(2024, 3, day, 12))
    appt(patient, created_at=utc(2024, 3, 17, 1))

    r = admin_client.get('/api/appointments/counts/week', {'at': AT})
    assert r.status_code == 200
    assert r.data['data'] == {'totalCurrent': 3, 'totalPrevious': 2, 'percentage': 50.0, 'period': 'week'}


def test_empty_previous_period_reports_100(admin_client, patient):
    appt(patient, created_at=utc(2024, 3, 5))
    r = admin_client.get('/api/appointments/counts/month', {'at': AT})
    assert r.data['data']['totalCurrent'] == 1
    assert r.data['data']['totalPrevious'] == 0
    assert r.data['data']['percentage'] == 100


def test_unknown_period_is_not_routed(admin_client):
    assert admin_client.get('/api/appointments/counts/decade').status_code == 404


def test_patient_counts_year(admin_client):
    for n, joined in enumerate([utc(2024, 1, 2), utc(2024, 6, 1), utc(2023, 8, 1), utc(2023, 9, 1)]):
        make_user(f'p{n}@example.com', date_joined=joined)
    # staff accounts are not patients
    make_user('nurse@olympus.test', role=User.ROLE_ADMIN, date_joined=utc(2024, 2, 1))

    r = admin_client.get('/api/users/counts/year', {'at': AT})
    assert r.data['data'] == {'totalCurrent': 2, 'totalPrevious': 2, 'percentage': 0.0, 'period': 'year'}


def test_reports_are_admin_only(patient_client):
    assert patient_client.get('/api/users/counts/week').status_code == 403
    assert patient_client.get('/api/services/reports/top').status_code == 403


def test_services_availed_counts_completed_departments(admin_client, patient):
    appt(patient, schedule=utc(2024, 3, 11, 9), status=Appointment.STATUS_COMPLETED,
         departments=['Dental Cleaning', 'X-Ray'])
    appt(patient, schedule=utc(2024, 3, 13, 9), status=Appointment.STATUS_COMPLETED)
    appt(patient, schedule=utc(2024, 3, 13, 10), status=Appointment.STATUS_CANCELLED)
    r = admin_client.get('/api/services/counts/week', {'at': AT})
    assert r.data['data']['totalCurrent'] == 3
    assert r.data['data']['totalPrevious'] == 0
    assert r.data['data']['percentage'] == 100


def test_completed_histograms(admin_client, patient):
    done = Appointment.STATUS_COMPLETED
    appt(patient, schedule=utc(2024, 3, 10, 9), status=done)   # Sunday
    appt(patient, schedule=utc(2024, 3, 16, 9), status=done)   # Saturday
    appt(patient, schedule=utc(2024, 3, 16, 10))               # not completed
    appt(patient, schedule=utc(2024, 1, 20, 9), status=done)
    appt(patient, schedule=utc(2021, 5, 1, 9), status=done)

    week = admin_client.get('/api/appointments/completed/week', {'at': AT}).data['data']
    assert len(week['data']) == 7
    assert week['data'] == [1, 0, 0, 0, 0, 0, 1]

    month = admin_client.get('/api/appointments/completed/month', {'at': AT}).data['data']
    assert len(month['data']) == 12
    assert month['data'][0] == 1 and month['data'][2] == 2

    year = admin_client.get('/api/appointments/completed/year', {'at': AT}).data['data']
    assert year['labels'] == ['2020', '2021', '2022', '2023', '2024']
    assert year['data'] == [0, 1, 0, 0, 3]


def test_today_counts(admin_client, patient):
    today = shift(timezone.now()).date().isoformat()
    appt(patient, schedule=parse_wall_clock(today, '09:00'))
    appt(patient, schedule=parse_wall_clock(today, '10:00'), status=Appointment.STATUS_APPROVED)
    appt(patient, schedule=parse_wall_clock(today, '11:00'), status=Appointment.STATUS_NO_SHOW)
    appt(patient, schedule=utc(2020, 1, 1, 9), status=Appointment.STATUS_APPROVED)

    data = admin_client.get('/api/appointments/counts/today').data['data']
    assert data['total'] == 3
    assert data['pending'] == 1
    assert data['approved'] == 1
    assert data['noShow'] == 1
    assert data['completed'] == 0


def test_top_services(admin_client, patient):
    Service.objects.create(name='Dental Cleaning', price=Decimal('1200.00'))
    Service.objects.create(name='X-Ray', price=Decimal('1500.00'))
    done = Appointment.STATUS_COMPLETED
    appt(patient, status=done, departments=['Dental Cleaning', 'X-Ray'])
    appt(patient, status=done, departments=['Dental Cleaning'])
    appt(patient, status=done, departments=['Laboratory'])
    appt(patient, departments=['X-Ray'])

    r = admin_client.get('/api/services/reports/top', {'limit': 2})
    assert r.status_code == 200
    top = r.data['data']
    assert len(top) == 2
    assert top[0] == {'name': 'Dental Cleaning', 'count': 2, 'price': 1200.0}
    assert top[1]['count'] == 1
