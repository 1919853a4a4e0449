from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Service
from clinic.permissions import IsAdminRole
from clinic.serializers.common import PageQuerySerializer, PeriodQuerySerializer
from clinic.serializers.service import ServiceSerializer, TopServicesQuerySerializer
from clinic.services import reports
from clinic.services.catalog import format_service
from clinic.services.pagination import paginate

TOP_SERVICES_TTL = 60


@api_view(['GET'])
@permission_classes([IsAdminRole])
def top_services(request):
    q = TopServicesQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    limit = q.validated_data['limit']
    cache_key = f"services:top:{limit}"
    data = cache.get(cache_key)
    if data is None:
        data = reports.top_services(limit)
        cache.set(cache_key, data, TOP_SERVICES_TTL)
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def services_counts(request, granularity: str):
    q = PeriodQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': reports.services_counts(granularity, q.validated_data.get('at'))})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def add_service(request):
    s = ServiceSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    service = s.save()
    return Response({'ok': True, 'data': format_service(service)}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_services(request):
    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    status = request.query_params.get('status')
    qs = Service.objects.order_by('name')
    if status:
        qs = qs.filter(status=status)
    items, meta = paginate(qs, q.validated_data.get('page'), q.validated_data.get('pageSize'))
    return Response({'ok': True, 'data': [format_service(s) for s in items], 'pagination': meta})


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def service_detail(request, pk: int):
    service = Service.objects.filter(pk=pk).first()
    if not service:
        raise NotFound('Service not found')
    if request.method == 'GET':
        return Response({'ok': True, 'data': format_service(service)})
    if request.method == 'DELETE':
        service.delete()
        return Response(status=204)
    s = ServiceSerializer(instance=service, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    service = s.save()
    return Response({'ok': True, 'data': format_service(service)})
