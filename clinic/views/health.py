import logging

from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _cache_ok() -> bool:
    try:
        cache.set('healthz:ping', 1, 5)
        return cache.get('healthz:ping') == 1
    except Exception as e:  # redis client errors vary by backend
        logger.warning('cache health check failed: %s', e)
        return False


def healthz(request):
    """Liveness probe: database round trip plus cache read/write."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            db_ok = c.fetchone() == (1,)
    except DatabaseError as e:
        logger.warning('database health check failed: %s', e)
        return JsonResponse({'ok': False, 'db': False, 'error': str(e)}, status=503)
    cache_ok = _cache_ok()
    return JsonResponse({'ok': db_ok and cache_ok, 'db': db_ok, 'cache': cache_ok}, status=200 if db_ok else 503)
