"""
API error types and the DRF exception handler that renders them.

Every error leaves the API as ``{"ok": false, "message": ..., "code": ...}``
with field validation problems listed under ``errors``.
"""
import logging

from django.conf import settings
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ValidationError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation failed'
    default_code = 'validation_error'


class AuthError(exceptions.APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication failed'
    default_code = 'auth_error'

    def __init__(self, detail=None, code=None, extra=None):
        super().__init__(detail, code)
        self.extra = extra or {}


class AccessDenied(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'access_denied'


class NotFoundError(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class ConflictError(exceptions.APIException):
    """Duplicate or already-existing state; reported as a bad request."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Conflict'
    default_code = 'conflict'


class InternalError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Server error'
    default_code = 'server_error'


# DRF's own exceptions keep their status but get a stable code.
_DRF_CODES = {
    exceptions.ValidationError: 'validation_error',
    exceptions.ParseError: 'validation_error',
    exceptions.NotAuthenticated: 'auth_error',
    exceptions.AuthenticationFailed: 'auth_error',
    exceptions.PermissionDenied: 'access_denied',
    exceptions.NotFound: 'not_found',
    exceptions.MethodNotAllowed: 'method_not_allowed',
    exceptions.Throttled: 'throttled',
}


def _flatten(detail):
    if isinstance(detail, dict):
        return {k: _flatten(v) for k, v in detail.items()}
    if isinstance(detail, list):
        return [_flatten(v) for v in detail]
    return str(detail)


def _first_message(errors):
    if isinstance(errors, dict):
        for value in errors.values():
            return _first_message(value)
    if isinstance(errors, list) and errors:
        return _first_message(errors[0])
    return str(errors) if errors else 'Validation failed'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error in %s', context.get('view').__class__.__name__, exc_info=exc)
        body = {'ok': False, 'message': InternalError.default_detail, 'code': InternalError.default_code}
        if settings.DEBUG:
            body['error'] = str(exc)
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, Http404):
        code = 'not_found'
    else:
        code = next((c for cls, c in _DRF_CODES.items() if isinstance(exc, cls)), None)
        if code is None:
            code = getattr(exc, 'default_code', 'api_error')

    body = {'ok': False, 'code': code}
    if isinstance(exc, exceptions.ValidationError) and isinstance(exc.detail, (dict, list)):
        errors = _flatten(exc.detail)
        body['message'] = _first_message(errors)
        body['errors'] = errors
    else:
        detail = getattr(exc, 'detail', None)
        if detail is None and isinstance(resp.data, dict):
            detail = resp.data.get('detail')
        body['message'] = str(detail) if detail is not None else str(exc)

    body.update(getattr(exc, 'extra', {}) or {})
    if isinstance(exc, InternalError) and settings.DEBUG and exc.__cause__ is not None:
        body['error'] = str(exc.__cause__)
    resp.data = body
    return resp
