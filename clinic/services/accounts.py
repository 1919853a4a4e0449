"""
Account management: patient sign-up, staff accounts, profile updates and
the e-mailed password reset code flow.
"""
from __future__ import annotations

import logging
import secrets
from typing import Optional

from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound, ValidationError as DRFValidation

from clinic.models import User
from clinic.services.periods import iso

logger = logging.getLogger(__name__)

# request field -> model attribute
PROFILE_FIELDS = {
    'firstname': 'first_name',
    'surname': 'last_name',
    'birthDate': 'birth_date',
    'gender': 'gender',
    'maritalStatus': 'marital_status',
    'address': 'address',
    'email': 'email',
    'phoneNumber': 'phone_number',
}


def _check_password(password: str, user: Optional[User] = None) -> None:
    try:
        validate_password(password, user=user)
    except ValidationError as e:
        raise DRFValidation({'password': e.messages})


def create_account(data: dict, *, role: str) -> User:
    """Create a user from validated sign-up data."""
    email = data['email']
    user = User(username=email, role=role)
    for key, attr in PROFILE_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key])
    _check_password(data['password'], user)
    user.set_password(data['password'])
    user.save()
    logger.info('created %s account %s', role, user.id)
    return user


def apply_profile(user: User, data: dict) -> User:
    for key, attr in PROFILE_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key])
    if 'email' in data:
        user.username = data['email']
    if 'role' in data:
        user.role = data['role']
    if 'isActive' in data:
        user.is_active = data['isActive']
    if data.get('password'):
        _check_password(data['password'], user)
        user.set_password(data['password'])
    user.save()
    return user


def search_users(role: str, q: Optional[str] = None) -> QuerySet:
    """Users of ``role`` whose name or e-mail matches ``q``.

    The match runs in the database so callers can paginate the filtered
    result directly.
    """
    qs = User.objects.filter(role=role)
    for term in (q or '').split():
        qs = qs.filter(Q(first_name__icontains=term) | Q(last_name__icontains=term) | Q(email__icontains=term))
    return qs.order_by('-date_joined', '-id')


def get_user_or_404(pk) -> User:
    user = User.objects.filter(pk=pk).first()
    if not user:
        raise NotFound('User not found')
    return user


def format_user(u: User) -> dict:
    return {
        'id': u.id,
        'firstname': u.first_name,
        'surname': u.last_name,
        'name': u.full_name,
        'email': u.email,
        'role': u.role,
        'gender': u.gender,
        'maritalStatus': u.marital_status,
        'birthDate': u.birth_date.isoformat() if u.birth_date else None,
        'address': u.address,
        'phoneNumber': u.phone_number,
        'isActive': u.is_active,
        'createdAt': iso(u.date_joined),
    }


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------

def _find_by_email(email: str) -> User:
    user = User.objects.filter(email__iexact=email.strip()).first()
    if not user:
        raise NotFound('User belonging to this email not found')
    return user


def request_password_reset(email: str) -> User:
    user = _find_by_email(email)
    code = f"{secrets.randbelow(9000) + 1000}"
    user.reset_code = code
    user.save(update_fields=['reset_code'])
    send_mail(
        subject='Password Reset Code',
        message=(
            f"Hello {user.full_name},\n\n"
            f"Your password reset code is {code}.\n"
            "If you did not request a reset you can ignore this e-mail."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )
    logger.info('password reset code sent to user %s', user.id)
    return user


def verify_reset_code(email: str, code: str) -> User:
    user = _find_by_email(email)
    if not user.reset_code or user.reset_code != str(code).strip():
        raise DRFValidation({'resetCode': 'Invalid reset code'})
    return user


def reset_password(email: str, code: str, password: str) -> User:
    user = verify_reset_code(email, code)
    _check_password(password, user)
    user.set_password(password)
    user.reset_code = ''
    user.save(update_fields=['password', 'reset_code'])
    logger.info('password reset for user %s', user.id)
    return user
