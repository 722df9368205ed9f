"""
Custom exception handlers for consistent API responses
"""
from django.db import DatabaseError
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    status.HTTP_400_BAD_REQUEST: 'Validation error',
    status.HTTP_401_UNAUTHORIZED: 'Authentication required',
    status.HTTP_403_FORBIDDEN: 'Permission denied',
    status.HTTP_404_NOT_FOUND: 'Resource not found',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'Method not allowed',
}


def custom_exception_handler(exc, context):
    """
    Reshape DRF errors into the {code, msg, errors} envelope.

    Storage failures that escape a view become a 503 so they are never
    mistaken for business errors.
    """
    response = exception_handler(exc, context)

    if response is None:
        if isinstance(exc, DatabaseError):
            logger.exception(f"Database error in {context['view'].__class__.__name__}: {exc}")
            return Response({
                'code': status.HTTP_503_SERVICE_UNAVAILABLE,
                'msg': 'Service temporarily unavailable',
                'errors': {'error': 'service_unavailable'}
            }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return None

    if response.status_code >= 500:
        logger.error(f"API Exception: {exc}", exc_info=True)
    else:
        logger.warning(f"API Exception: {exc}")

    custom_response_data = {
        'code': response.status_code,
        'msg': STATUS_MESSAGES.get(response.status_code, 'An error occurred'),
        'errors': response.data
    }
    if response.status_code >= 500:
        custom_response_data['msg'] = 'Internal server error'
        # Don't expose internal errors to non-staff
        user = getattr(context['request'], 'user', None)
        if not user or not user.is_staff:
            custom_response_data['errors'] = {'detail': 'Internal server error'}

    response.data = custom_response_data
    return response
