"""
Authentication views and helper functions.

Sign-up, login, token refresh/logout and the password reset flow used
by both front-ends.  Login hands out both a legacy DRF token (``Token``
header) and a simplejwt access/refresh pair (``Bearer`` header); both
are accepted by the authentication classes configured in settings.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from clinic.serializers.auth import (
    ForgotPasswordSerializer,
    LoginSerializer,
    ResetCodeSerializer,
    ResetPasswordSerializer,
    SignupSerializer,
)
from clinic.services import accounts

from .models import User

logger = logging.getLogger(__name__)


def _token_payload(user: User) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': {
            'id': user.id,
            'email': user.email,
            'name': user.full_name,
            'role': user.role,
        },
    }


# ---------------------------------------------------------------------
# Sign-up (patients only; staff accounts are created by admins)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def signup_view(request):
    s = SignupSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.create_account(s.validated_data, role=User.ROLE_PATIENT)
    return Response(_token_payload(user), status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------
# E-mail/password login (no role bypass)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login with e-mail and password.
    Accepts fields:
      - email, password
      - role (optional): the portal the user is signing into; must match
        the account's role.  It is only checked, never assigned.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    account = User.objects.filter(email__iexact=vd['email']).only('username').first()
    user = authenticate(request, username=account.username if account else vd['email'], password=vd['password'])
    if not user:
        logger.info('failed login for %s from %s', vd['email'], request.META.get('REMOTE_ADDR'))
        return Response(
            {'ok': False, 'error': {'code': 'invalid_credentials', 'message': 'Incorrect user credentials'}},
            status=400,
        )

    if vd.get('role') and vd['role'] != user.role:
        return Response(
            {'ok': False, 'error': {'code': 'permission_denied', 'message': 'You are not authorized to access this site'}},
            status=403,
        )

    logger.info('user %s logged in', user.id)
    return Response(_token_payload(user), status=200)

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    data = dict(resp.data)
    if 'access' in data and 'jwt_access' not in data:
        data['jwt_access'] = data.pop('access')
    return Response(data, status=resp.status_code)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the user's refresh tokens (all or a given one) and drop the legacy token."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'ok': False, 'error': {'code': 'token_not_valid', 'message': str(e)}}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = token.blacklistedtoken_set.model.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'ok': True, 'revoked': count})


# ---------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def forgot_password_view(request):
    s = ForgotPasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.request_password_reset(s.validated_data['email'])
    return Response({'ok': True})

forgot_password_view.cls.throttle_scope = 'password_reset'


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_code_view(request):
    s = ResetCodeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.verify_reset_code(s.validated_data['email'], s.validated_data['resetCode'])
    return Response({'ok': True})

reset_code_view.cls.throttle_scope = 'password_reset'


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password_view(request):
    s = ResetPasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    accounts.reset_password(vd['email'], vd['resetCode'], vd['password'])
    return Response({'ok': True, 'detail': 'Password reset successfully'})
