from datetime import timedelta

import pytest
from django.utils import timezone

from clinic.models import Appointment, Doctor, Schedule
from clinic.services.periods import parse_wall_clock, shift

from .conftest import make_user

pytestmark = pytest.mark.django_db


def clinic_today():
    return shift(timezone.now()).date()


def book(patient, day='2024-03-20', time='09:30', status=Appointment.STATUS_PENDING, departments=None, **extra):
    return Appointment.objects.create(
        patient=patient,
        medical_department=departments or ['General Consultation'],
        email=patient.email,
        phone_number='09170000001',
        schedule=parse_wall_clock(day, time),
        status=status,
        **extra,
    )


PAYLOAD = {
    'medicalDepartment': ['General Consultation', 'Laboratory'],
    'date': '2024-03-20',
    'time': '09:30',
    'email': 'juan@example.com',
    'phoneNumber': '09170000001',
}


# ---------------------------------------------------------------------------
# Booking and the patient's own list
# ---------------------------------------------------------------------------

def test_patient_books_appointment(patient_client, patient):
    r = patient_client.post('/api/appointments/create', PAYLOAD, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['status'] == 'Pending'
    assert data['patientId'] == patient.id
    assert data['medicalDepartment'] == ['General Consultation', 'Laboratory']
    # 09:30 in a UTC+8 clinic
    assert data['schedule'] == '2024-03-20T01:30:00.000Z'
    appt = Appointment.objects.get(pk=data['id'])
    assert appt.schedule == parse_wall_clock('2024-03-20', '09:30')


@pytest.mark.parametrize('departments', [[], ['A', 'B', 'C', 'D']])
def test_department_count_is_limited(patient_client, departments):
    r = patient_client.post('/api/appointments/create', {**PAYLOAD, 'medicalDepartment': departments}, format='json')
    assert r.status_code == 400


def test_bad_date_is_rejected(patient_client):
    r = patient_client.post('/api/appointments/create', {**PAYLOAD, 'date': '2024-02-31'}, format='json')
    assert r.status_code == 400


def test_admin_cannot_book(admin_client):
    assert admin_client.post('/api/appointments/create', PAYLOAD, format='json').status_code == 403


def test_anonymous_cannot_list(api_client):
    assert api_client.get('/api/appointments').status_code in (401, 403)


def test_my_appointments_are_own_and_ascending(patient_client, patient):
    other = make_user('other@example.com')
    late = book(patient, day='2024-03-22')
    early = book(patient, day='2024-03-21')
    book(other, day='2024-03-21')
    r = patient_client.get('/api/appointments')
    assert r.status_code == 200
    assert [a['id'] for a in r.data['data']] == [early.id, late.id]
    assert r.data['pagination']['total'] == 2


def test_my_today(patient_client, patient):
    today = book(patient, day=clinic_today().isoformat())
    book(patient, day=(clinic_today() + timedelta(days=1)).isoformat())
    r = patient_client.get('/api/appointments/today')
    assert [a['id'] for a in r.data['data']] == [today.id]


# ---------------------------------------------------------------------------
# Owner edits, cancellation and deletion
# ---------------------------------------------------------------------------

def test_owner_edits_pending_appointment(patient_client, patient):
    appt = book(patient)
    r = patient_client.patch(f'/api/appointments/{appt.id}', {'date': '2024-03-25', 'time': '14:00'}, format='json')
    assert r.status_code == 200
    appt.refresh_from_db()
    assert appt.schedule == parse_wall_clock('2024-03-25', '14:00')


def test_date_without_time_is_rejected(patient_client, patient):
    appt = book(patient)
    r = patient_client.patch(f'/api/appointments/{appt.id}', {'date': '2024-03-25'}, format='json')
    assert r.status_code == 400


def test_approved_appointment_can_only_be_cancelled(patient_client, patient):
    appt = book(patient, status=Appointment.STATUS_APPROVED)
    r = patient_client.patch(f'/api/appointments/{appt.id}', {'email': 'new@example.com'}, format='json')
    assert r.status_code == 400
    r = patient_client.patch(f'/api/appointments/{appt.id}', {'status': 'Cancelled'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'Cancelled'


def test_completed_appointment_cannot_be_cancelled(patient_client, patient):
    appt = book(patient, status=Appointment.STATUS_COMPLETED)
    r = patient_client.patch(f'/api/appointments/{appt.id}', {'status': 'Cancelled'}, format='json')
    assert r.status_code == 400


def test_other_patients_appointment_is_hidden(patient_client):
    other = make_user('other@example.com')
    appt = book(other)
    assert patient_client.patch(f'/api/appointments/{appt.id}', {'status': 'Cancelled'}, format='json').status_code == 404
    assert patient_client.delete(f'/api/appointments/{appt.id}').status_code == 404


def test_soft_then_hard_delete(patient_client, admin_client, patient):
    appt = book(patient)
    assert patient_client.delete(f'/api/appointments/{appt.id}').status_code == 204
    appt.refresh_from_db()
    assert appt.is_deleted
    assert patient_client.get('/api/appointments').data['pagination']['total'] == 0

    second = book(patient)
    assert admin_client.delete(f'/api/appointments/{second.id}?hard=true').status_code == 204
    assert not Appointment.objects.filter(pk=second.id).exists()


# ---------------------------------------------------------------------------
# Admin queues
# ---------------------------------------------------------------------------

def test_pending_filters_by_date_and_service(admin_client, patient):
    match = book(patient, day='2024-03-20', departments=['Dental Cleaning', 'X-Ray'])
    book(patient, day='2024-03-21', departments=['Dental Cleaning'])
    book(patient, day='2024-03-20', departments=['Laboratory'])
    book(patient, day='2024-03-20', departments=['Dental Cleaning'], status=Appointment.STATUS_APPROVED)

    r = admin_client.get('/api/appointments/pending', {'date': '2024-03-20', 'service': 'Dental Cleaning'})
    assert r.status_code == 200
    assert [a['id'] for a in r.data['data']] == [match.id]


def test_pending_is_admin_only(patient_client):
    assert patient_client.get('/api/appointments/pending').status_code == 403


def test_all_searches_patient_name_before_paginating(admin_client, patient):
    ana = make_user('ana@example.com', first_name='Ana', last_name='Reyes')
    for day in range(10, 16):
        book(patient, day=f'2024-03-{day}')
    for day in range(10, 13):
        book(ana, day=f'2024-03-{day}')

    r = admin_client.get('/api/appointments/all', {'q': 'reyes', 'pageSize': 2})
    assert r.data['pagination']['total'] == 3
    assert r.data['pagination']['totalPages'] == 2
    assert len(r.data['data']) == 2
    assert all(a['patientId'] == ana.id for a in r.data['data'])

    r = admin_client.get('/api/appointments/all', {'q': 'reyes', 'pageSize': 2, 'page': 2})
    assert len(r.data['data']) == 1


def test_all_filters_by_status(admin_client, patient):
    book(patient, status=Appointment.STATUS_COMPLETED)
    book(patient)
    r = admin_client.get('/api/appointments/all', {'status': 'Completed'})
    assert [a['status'] for a in r.data['data']] == ['Completed']


def test_today_approved_and_cancelled_queues(admin_client, patient):
    today = clinic_today().isoformat()
    approved = book(patient, day=today, status=Appointment.STATUS_APPROVED)
    book(patient, day=today)
    cancelled = book(patient, status=Appointment.STATUS_CANCELLED)
    no_show = book(patient, day='2024-03-21', status=Appointment.STATUS_NO_SHOW)

    r = admin_client.get('/api/appointments/today/approved')
    assert [a['id'] for a in r.data['data']] == [approved.id]

    r = admin_client.get('/api/appointments/cancelled')
    assert {a['id'] for a in r.data['data']} == {cancelled.id, no_show.id}


def test_archive_toggle(admin_client, patient):
    appt = book(patient, status=Appointment.STATUS_COMPLETED)
    r = admin_client.patch(f'/api/appointments/{appt.id}/archive')
    assert r.status_code == 200
    assert r.data['data']['isArchived'] is True
    assert [a['id'] for a in admin_client.get('/api/appointments/archive').data['data']] == [appt.id]
    admin_client.patch(f'/api/appointments/{appt.id}/archive')
    appt.refresh_from_db()
    assert appt.is_archived is False


@pytest.mark.parametrize('action,status', [
    ('approve', 'Approved'),
    ('decline', 'Declined'),
    ('completed', 'Completed'),
    ('noshow', 'No Show'),
])
def test_status_actions(admin_client, patient, action, status):
    appt = book(patient)
    r = admin_client.patch(f'/api/appointments/{appt.id}/{action}')
    assert r.status_code == 200
    appt.refresh_from_db()
    assert appt.status == status


def test_unknown_action_is_400(admin_client, patient):
    appt = book(patient)
    assert admin_client.patch(f'/api/appointments/{appt.id}/teleport').status_code == 400


def test_unknown_appointment_is_404(admin_client):
    assert admin_client.patch('/api/appointments/999/approve').status_code == 404


# ---------------------------------------------------------------------------
# Doctor assignment
# ---------------------------------------------------------------------------

@pytest.fixture
def on_duty(patient):
    appt = book(patient, day='2024-03-20', time='09:30')
    doctor = Doctor.objects.create(name='Dr. Ana Cruz', specialization='Pediatrics', schedule=timezone.now())
    off = Doctor.objects.create(name='Dr. Paolo Lim', specialization='Radiology', schedule=timezone.now())
    Schedule.objects.create(doctor=doctor, start=parse_wall_clock('2024-03-20', '08:00'),
                            end=parse_wall_clock('2024-03-20', '12:00'))
    Schedule.objects.create(doctor=off, start=parse_wall_clock('2024-03-20', '13:00'),
                            end=parse_wall_clock('2024-03-20', '17:00'))
    return appt, doctor, off


def test_doctors_available(admin_client, on_duty):
    appt, doctor, _ = on_duty
    r = admin_client.get(f'/api/appointments/{appt.id}/doctors-available')
    assert [d['id'] for d in r.data['data']] == [doctor.id]


def test_assign_doctor(admin_client, on_duty):
    appt, doctor, off = on_duty
    r = admin_client.patch(f'/api/appointments/{appt.id}/doctor', {'doctorId': doctor.id}, format='json')
    assert r.status_code == 200
    assert r.data['data']['doctorName'] == 'Dr. Ana Cruz'

    r = admin_client.patch(f'/api/appointments/{appt.id}/doctor', {'doctorId': off.id}, format='json')
    assert r.status_code == 400
    r = admin_client.patch(f'/api/appointments/{appt.id}/doctor', {'doctorId': off.id, 'force': True}, format='json')
    assert r.status_code == 200

    r = admin_client.patch(f'/api/appointments/{appt.id}/doctor', {'doctorId': None}, format='json')
    assert r.data['data']['doctorId'] is None

    assert admin_client.patch(
        f'/api/appointments/{appt.id}/doctor', {'doctorId': 4242}, format='json'
    ).status_code == 404
