from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Doctor
from clinic.permissions import IsAdminRole
from clinic.serializers.doctor import DoctorListQuerySerializer, DoctorSerializer
from clinic.services.doctors import format_doctor, search_doctors
from clinic.services.pagination import paginate


@api_view(['POST'])
@permission_classes([IsAdminRole])
def add_doctor(request):
    s = DoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = s.save()
    return Response({'ok': True, 'data': format_doctor(doctor)}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_doctors(request):
    """Doctor list.
    Query params:
      - q: name or specialization contains
      - specialization: exact specialization
      - page, pageSize
    """
    q = DoctorListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = search_doctors(q=(vd.get('q') or '').strip() or None, specialization=vd.get('specialization'))
    items, meta = paginate(qs, vd.get('page'), vd.get('pageSize'))
    return Response({'ok': True, 'data': [format_doctor(d) for d in items], 'pagination': meta})


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def doctor_detail(request, pk: int):
    doctor = Doctor.objects.filter(pk=pk).first()
    if not doctor:
        raise NotFound('Doctor not found')
    if request.method == 'GET':
        return Response({'ok': True, 'data': format_doctor(doctor)})
    if request.method == 'DELETE':
        doctor.delete()
        return Response(status=204)
    s = DoctorSerializer(instance=doctor, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    doctor = s.save()
    return Response({'ok': True, 'data': format_doctor(doctor)})
