import pytest

from clinic.models import User

from .conftest import PASSWORD, make_user

pytestmark = pytest.mark.django_db

SIGNUP = {
    'firstname': 'Maria',
    'surname': 'Clara',
    'maritalStatus': 'Single',
    'gender': 'Female',
    'birthDate': '1995-06-12',
    'address': '12 Rizal Street',
    'email': 'Maria.Clara@Example.com',
    'phoneNumber': '09171234567',
    'password': PASSWORD,
}


def test_signup_creates_patient_and_returns_tokens(api_client):
    r = api_client.post('/api/auth/signup', SIGNUP, format='json')
    assert r.status_code == 201
    assert r.data['token'] and r.data['jwt_access'] and r.data['jwt_refresh']
    user = User.objects.get(email='maria.clara@example.com')
    assert user.role == User.ROLE_PATIENT
    assert user.first_name == 'Maria'
    assert user.check_password(PASSWORD)


def test_signup_duplicate_email_is_400(api_client, patient):
    r = api_client.post('/api/auth/signup', {**SIGNUP, 'email': patient.email}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_signup_requires_all_profile_fields(api_client):
    data = dict(SIGNUP)
    data.pop('address')
    r = api_client.post('/api/auth/signup', data, format='json')
    assert r.status_code == 400


def test_login_returns_jwt_and_legacy_token(api_client, patient):
    r = api_client.post('/api/auth/login', {'email': patient.email, 'password': PASSWORD}, format='json')
    assert r.status_code == 200
    assert r.data['role'] == 'patient'
    assert r.data['user']['id'] == patient.id

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    me = api_client.get('/api/users/my-account')
    assert me.status_code == 200
    assert me.data['data']['email'] == patient.email

    api_client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert api_client.get('/api/users/my-account').status_code == 200


def test_login_email_is_case_insensitive(api_client, patient):
    r = api_client.post('/api/auth/login', {'email': patient.email.upper(), 'password': PASSWORD}, format='json')
    assert r.status_code == 200


def test_wrong_password_is_rejected(api_client, patient):
    r = api_client.post('/api/auth/login', {'email': patient.email, 'password': 'nope'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_credentials'


def test_login_with_other_role_is_forbidden_and_not_escalated(api_client, patient):
    r = api_client.post(
        '/api/auth/login', {'email': patient.email, 'password': PASSWORD, 'role': 'admin'}, format='json'
    )
    assert r.status_code == 403
    patient.refresh_from_db()
    assert patient.role == User.ROLE_PATIENT


def test_admin_login_on_staff_portal(api_client, admin_user):
    r = api_client.post(
        '/api/auth/login', {'email': admin_user.email, 'password': PASSWORD, 'role': 'admin'}, format='json'
    )
    assert r.status_code == 200
    assert r.data['role'] == 'admin'


def test_refresh_and_logout(api_client, patient):
    r = api_client.post('/api/auth/login', {'email': patient.email, 'password': PASSWORD}, format='json')
    refresh = r.data['jwt_refresh']

    r2 = api_client.post('/api/auth/refresh', {'refresh': refresh}, format='json')
    assert r2.status_code == 200
    assert 'jwt_access' in r2.data

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    out = api_client.post('/api/auth/logout', {'refresh': refresh}, format='json')
    assert out.status_code == 200
    assert out.data['revoked'] == 1

    api_client.credentials()
    again = api_client.post('/api/auth/refresh', {'refresh': refresh}, format='json')
    assert again.status_code == 401


def test_password_reset_flow(api_client, patient, mailoutbox):
    r = api_client.post('/api/auth/forgot-password', {'email': patient.email}, format='json')
    assert r.status_code == 200
    patient.refresh_from_db()
    code = patient.reset_code
    assert len(code) == 4 and code.isdigit()
    assert len(mailoutbox) == 1
    assert code in mailoutbox[0].body
    assert mailoutbox[0].to == [patient.email]

    bad = '0000' if code != '0000' else '1111'
    assert api_client.post('/api/auth/reset-code', {'email': patient.email, 'resetCode': bad}, format='json').status_code == 400
    assert api_client.post('/api/auth/reset-code', {'email': patient.email, 'resetCode': code}, format='json').status_code == 200

    new_password = 'Another#Secret77'
    r = api_client.post(
        '/api/auth/reset-password',
        {'email': patient.email, 'resetCode': code, 'password': new_password},
        format='json',
    )
    assert r.status_code == 200
    patient.refresh_from_db()
    assert patient.check_password(new_password)
    assert patient.reset_code == ''


def test_reset_password_needs_the_code(api_client, patient):
    r = api_client.post(
        '/api/auth/reset-password',
        {'email': patient.email, 'resetCode': '1234', 'password': 'Another#Secret77'},
        format='json',
    )
    assert r.status_code == 400
    patient.refresh_from_db()
    assert patient.check_password(PASSWORD)


def test_forgot_password_unknown_email_is_404(api_client):
    r = api_client.post('/api/auth/forgot-password', {'email': 'ghost@example.com'}, format='json')
    assert r.status_code == 404


def test_inactive_account_cannot_log_in(api_client):
    user = make_user('inactive@example.com', is_active=False)
    r = api_client.post('/api/auth/login', {'email': user.email, 'password': PASSWORD}, format='json')
    assert r.status_code == 400
