# api/exceptions.py
"""
Renders every API error as ``{"error": "<message>"}``.

Business-rule errors keep their message and status. Anything unexpected is
logged with its traceback and returned as a generic 500 so internal error
text never reaches the caller.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from donorlink.exceptions import DependencyError

logger = logging.getLogger(__name__)


def _first_message(data):
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for field, value in data.items():
            message = _first_message(value)
            return message if field == 'non_field_errors' else f"{field}: {message}"
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def _view_name(context):
    view = context.get('view')
    return view.__class__.__name__ if view is not None else 'unknown view'


def exception_handler(exc, context):
    response = drf_exception_handler(exc, context)

    if response is None:
        logger.error(f"Unhandled error in {_view_name(context)}: {exc}", exc_info=exc)
        return Response(
            {'error': str(DependencyError.default_detail)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, DependencyError):
        logger.error(f"Dependency failure in {_view_name(context)}: {exc}", exc_info=exc)
        response.data = {'error': str(DependencyError.default_detail)}
        return response

    response.data = {'error': _first_message(response.data)}
    return response
