import pytest

from clinic.models import User

from .conftest import PASSWORD, make_user

pytestmark = pytest.mark.django_db


def test_patient_search_paginates_filtered_set(admin_client):
    for n in range(12):
        make_user(f'santos{n}@example.com', first_name=f'Luz{n}', last_name='Santos')
    for n in range(5):
        make_user(f'cruz{n}@example.com', first_name=f'Ben{n}', last_name='Cruz')

    r = admin_client.get('/api/users/patients', {'q': 'cruz', 'pageSize': 3})
    assert r.status_code == 200
    assert r.data['pagination'] == {'total': 5, 'page': 1, 'pageSize': 3, 'totalPages': 2}
    assert len(r.data['data']) == 3
    assert all(u['surname'] == 'Cruz' for u in r.data['data'])

    page2 = admin_client.get('/api/users/patients', {'q': 'cruz', 'pageSize': 3, 'page': 2})
    assert len(page2.data['data']) == 2


def test_patient_list_default_page_and_limit_alias(admin_client):
    for n in range(12):
        make_user(f'p{n}@example.com')
    r = admin_client.get('/api/users/patients')
    assert r.data['pagination']['pageSize'] == 10
    assert r.data['pagination']['total'] == 12
    r = admin_client.get('/api/users/patients', {'limit': 500})
    assert r.data['pagination']['pageSize'] == 100


def test_patient_list_excludes_admins(admin_client, admin_user, patient):
    r = admin_client.get('/api/users/patients')
    assert [u['id'] for u in r.data['data']] == [patient.id]
    r = admin_client.get('/api/users/admins')
    assert [u['id'] for u in r.data['data']] == [admin_user.id]


def test_create_admin(admin_client):
    r = admin_client.post('/api/users/admins/create', {
        'firstname': 'Nina',
        'surname': 'Vega',
        'gender': 'Female',
        'birthDate': '1990-01-01',
        'address': 'Clinic',
        'email': 'nina@olympus.test',
        'phoneNumber': '0917000',
        'password': PASSWORD,
    }, format='json')
    assert r.status_code == 201
    user = User.objects.get(email='nina@olympus.test')
    assert user.role == User.ROLE_ADMIN
    assert user.marital_status == 'N/A'


def test_weak_password_is_rejected(admin_client):
    r = admin_client.post('/api/users/admins/create', {
        'firstname': 'Nina',
        'surname': 'Vega',
        'gender': 'Female',
        'birthDate': '1990-01-01',
        'address': 'Clinic',
        'email': 'nina@olympus.test',
        'phoneNumber': '0917000',
        'password': '12345678',
    }, format='json')
    assert r.status_code == 400
    assert not User.objects.filter(email='nina@olympus.test').exists()


def test_patients_cannot_manage_users(patient_client, patient):
    assert patient_client.get('/api/users/patients').status_code == 403
    assert patient_client.get(f'/api/users/{patient.id}').status_code == 403


def test_my_account_update(patient_client, patient):
    r = patient_client.patch('/api/users/update', {
        'address': '<span>7 Mabini</span> Street',
        'password': 'Fresh#Password99',
        'role': 'admin',
    }, format='json')
    assert r.status_code == 200
    patient.refresh_from_db()
    assert patient.address == '7 Mabini Street'
    assert patient.check_password('Fresh#Password99')
    # not a self-service field
    assert patient.role == User.ROLE_PATIENT


def test_my_account_email_must_be_unique(patient_client, admin_user):
    r = patient_client.patch('/api/users/update', {'email': admin_user.email}, format='json')
    assert r.status_code == 400


def test_admin_user_detail(admin_client, patient):
    r = admin_client.get(f'/api/users/{patient.id}')
    assert r.data['data']['email'] == patient.email

    r = admin_client.patch(f'/api/users/{patient.id}', {'isActive': False, 'maritalStatus': 'Married'}, format='json')
    assert r.status_code == 200
    patient.refresh_from_db()
    assert patient.is_active is False
    assert patient.marital_status == 'Married'

    assert admin_client.delete(f'/api/users/{patient.id}').status_code == 204
    assert admin_client.get(f'/api/users/{patient.id}').status_code == 404


def test_admin_cannot_delete_self(admin_client, admin_user):
    assert admin_client.delete(f'/api/users/{admin_user.id}').status_code == 400
