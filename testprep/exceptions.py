"""
Error envelope for the API.

Every error leaves the API as ``{"error": str, "details"?: object}``.
"""
import logging

from django.conf import settings
from django.http import JsonResponse
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class ApiError(APIException):
    """APIException that can carry a structured ``details`` payload."""

    def __init__(self, detail=None, code=None, details=None):
        super().__init__(detail, code)
        self.details = details


class InvalidState(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The resource is not in a state that allows this operation.'
    default_code = 'invalid_state'


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The resource already exists.'
    default_code = 'conflict'


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'


def _message_from(data):
    if isinstance(data, dict) and 'detail' in data:
        return str(data['detail'])
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    request = context.get('request')

    if response is None:
        view = context.get('view')
        logger.exception(
            "Unhandled error in %s: %s",
            view.__class__.__name__ if view else 'unknown view', exc
        )
        set_rollback()
        body = {'error': 'Internal Server Error'}
        if settings.DEBUG:
            body['details'] = {'type': type(exc).__name__, 'message': str(exc)}
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = {'error': 'Validation failed', 'details': response.data}
        return response

    body = {'error': _message_from(response.data)}
    details = getattr(exc, 'details', None)
    if details:
        body['details'] = details
    response.data = body

    if isinstance(exc, PermissionDenied) and request is not None and request.user.is_authenticated:
        from testprep.models import AuditLog
        logger.warning("Permission denied: user=%s path=%s", request.user.pk, request.path)
        AuditLog.log(
            event_type=AuditLog.EventType.PERMISSION_DENIED,
            description=f"{request.method} {request.path}: {body['error']}",
            request=request,
        )
    elif isinstance(exc, InvalidState):
        logger.warning("Rejected in current state: %s (%s)", body['error'], request.path if request else '-')

    return response


def route_not_found(request, exception=None):
    return JsonResponse({'error': 'Route not found'}, status=404)
