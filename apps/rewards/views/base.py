"""
Error translation shared by the rewards views.
"""
import logging

from rest_framework import status

from apps.common.utils import error_response

logger = logging.getLogger(__name__)


def rewards_error_response(exc):
    """Business error -> 4xx envelope carrying the error code"""
    return error_response(exc.message, errors={'error': exc.code}, status_code=exc.status_code)


def storage_error_response(exc, operation):
    logger.exception(f"Storage failure during {operation}: {exc}")
    return error_response(
        'Rewards service temporarily unavailable',
        errors={'error': 'service_unavailable'},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
