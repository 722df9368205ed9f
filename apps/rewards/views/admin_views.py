"""
Staff-only rewards views.
"""
from django.db import DatabaseError
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.views import APIView

from apps.common.utils import success_response, error_response
from ..exceptions import RewardsError
from ..services import BalanceService
from .base import rewards_error_response, storage_error_response


class ReconcileView(APIView):
    """Report drift between a user's cached balance and their ledger"""
    permission_classes = [IsAuthenticated, IsAdminUser]

    def get(self, request):
        user_id = request.query_params.get('user_id', request.user.pk)
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return error_response('user_id must be an integer')

        try:
            return success_response(BalanceService.reconcile(user_id))
        except RewardsError as e:
            return rewards_error_response(e)
        except DatabaseError as e:
            return storage_error_response(e, 'reconcile')
