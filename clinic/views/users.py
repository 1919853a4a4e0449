from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import User
from clinic.permissions import IsAdminRole
from clinic.serializers.common import PeriodQuerySerializer
from clinic.serializers.user import (
    AccountUpdateSerializer,
    AdminCreateSerializer,
    AdminUpdateSerializer,
    UserListQuerySerializer,
)
from clinic.services import accounts, reports
from clinic.services.pagination import paginate


@api_view(['GET'])
@permission_classes([IsAdminRole])
def patient_counts(request, granularity: str):
    """New patients in the current week/month/year compared with the one before."""
    qs = PeriodQuerySerializer(data=request.query_params)
    qs.is_valid(raise_exception=True)
    data = reports.patient_counts(granularity, qs.validated_data.get('at'))
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def create_admin(request):
    s = AdminCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.create_account(s.validated_data, role=User.ROLE_ADMIN)
    return Response({'ok': True, 'data': accounts.format_user(user)}, status=201)


def _list_role(request, role: str):
    qs = UserListQuerySerializer(data=request.query_params)
    qs.is_valid(raise_exception=True)
    vd = qs.validated_data
    items, meta = paginate(accounts.search_users(role, vd.get('q')), vd.get('page'), vd.get('pageSize'))
    return Response({'ok': True, 'data': [accounts.format_user(u) for u in items], 'pagination': meta})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def list_admins(request):
    return _list_role(request, User.ROLE_ADMIN)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def list_patients(request):
    """Patients, newest first.
    Query params:
      - q: name / e-mail search (every word must match)
      - page, pageSize (or limit)
    """
    return _list_role(request, User.ROLE_PATIENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_account(request):
    return Response({'ok': True, 'data': accounts.format_user(request.user)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_my_account(request):
    s = AccountUpdateSerializer(instance=request.user, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    user = accounts.apply_profile(request.user, s.validated_data)
    return Response({'ok': True, 'data': accounts.format_user(user)})


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def user_detail(request, pk: int):
    user = accounts.get_user_or_404(pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': accounts.format_user(user)})
    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            return Response(
                {'ok': False, 'error': {'code': 'invalid', 'message': 'You cannot delete your own account'}},
                status=400,
            )
        user.delete()
        return Response(status=204)
    s = AdminUpdateSerializer(instance=user, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    user = accounts.apply_profile(user, s.validated_data)
    return Response({'ok': True, 'data': accounts.format_user(user)})
