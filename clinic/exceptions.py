"""
Error types and the unified API exception handler.

Validation failures use DRF's ``ValidationError`` (400) and missing rows
use ``NotFound`` (404).  Scheduling conflicts get their own type so the
client can tell "bad input" apart from "slot already taken".
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ScheduleConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Schedule overlaps with an existing schedule.'
    default_code = 'conflict'


def _error_code(exc) -> str:
    if isinstance(exc, Http404):
        return 'not_found'
    if isinstance(exc, APIException):
        return getattr(exc, 'default_code', None) or 'api_error'
    return 'api_error'


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        # model-level validators (full_clean) surface as plain 400s
        detail = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        return Response({'ok': False, 'error': {'code': 'invalid', 'message': detail}}, status=400)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view') if context else None
        logger.exception('unhandled error in %s', getattr(view, '__name__', view))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': _error_code(exc), 'message': detail}}, status=resp.status_code)
