import logging

from django.db import IntegrityError
from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def _message(data):
    if isinstance(data, dict) and data:
        if 'detail' in data:
            return str(data['detail'])
        field, errors = next(iter(data.items()))
        first = errors[0] if isinstance(errors, list) and errors else errors
        if field == 'non_field_errors':
            return str(first)
        return f"{field}: {first}"
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def api_exception_handler(exc, context):
    """Render every API failure as a flat ``{"error": "..."}`` body."""
    resp = drf_exception_handler(exc, context)
    if resp is not None:
        body = {'error': _message(resp.data)}
        if isinstance(exc, exceptions.ValidationError) and isinstance(resp.data, dict):
            body['details'] = resp.data
        return Response(body, status=resp.status_code)
    if isinstance(exc, IntegrityError):
        logger.warning("integrity error in %s: %s", context.get('view'), exc)
        return Response({'error': 'A record with these values already exists'}, status=400)
    logger.error("unhandled error in %s", context.get('view'), exc_info=exc)
    return Response({'error': 'Internal server error'}, status=500)
