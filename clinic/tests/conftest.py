import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import User

PASSWORD = 'Olympus#Clinic42'


@pytest.fixture(autouse=True)
def _isolated(settings):
    # throttle counters live in the cache
    cache.clear()
    settings.CLINIC_TZ_OFFSET_MINUTES = 480
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    }
    yield
    cache.clear()


def make_user(email, role=User.ROLE_PATIENT, **extra):
    extra.setdefault('first_name', email.split('@')[0].capitalize())
    extra.setdefault('last_name', 'Tester')
    return User.objects.create_user(username=email, email=email, password=PASSWORD, role=role, **extra)


@pytest.fixture
def admin_user(db):
    return make_user('staff@olympus.test', role=User.ROLE_ADMIN)


@pytest.fixture
def patient(db):
    return make_user('juan@example.com', phone_number='09170000001')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    c = APIClient()
    c.force_authenticate(user=admin_user)
    return c


@pytest.fixture
def patient_client(patient):
    c = APIClient()
    c.force_authenticate(user=patient)
    return c
