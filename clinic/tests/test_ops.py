import pytest
from django.core.management import call_command

from clinic.models import Appointment, Doctor, Schedule, Service, User

pytestmark = pytest.mark.django_db


def test_healthz(api_client):
    r = api_client.get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True, 'cache': True}


def test_metrics_endpoint(api_client):
    r = api_client.get('/metrics')
    assert r.status_code == 200
    assert b'django_http_requests' in r.content


def test_ensure_admin_is_idempotent():
    call_command('ensure_admin', email='Boss@Olympus.test', password='First#Pass123')
    user = User.objects.get(email='boss@olympus.test')
    user.role = User.ROLE_PATIENT
    user.save()

    call_command('ensure_admin', email='boss@olympus.test', password='Second#Pass123')
    assert User.objects.filter(email='boss@olympus.test').count() == 1
    user.refresh_from_db()
    assert user.role == User.ROLE_ADMIN
    assert user.check_password('Second#Pass123')


def test_seed_clinic_respects_schedule_guard():
    call_command('seed_clinic', patients=2, days=2)
    call_command('seed_clinic', patients=2, days=2)
    assert Service.objects.count() == 6
    assert Doctor.objects.count() == 4
    # second run adds no overlapping schedules
    assert Schedule.objects.count() == 4 * 5
    assert User.objects.filter(role=User.ROLE_PATIENT).count() == 2
    assert Appointment.objects.count() == 2 * 3 * 2
