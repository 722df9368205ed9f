"""
Read-only rewards views: balance overview, ledger listing, expiring points.
"""
from django.db import DatabaseError
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.common.utils import success_response, error_response
from ..exceptions import RewardsError
from ..permissions import IsCustomer
from ..serializers import (
    ExpiringTransactionSerializer, RewardTransactionSerializer, TransactionQuerySerializer
)
from ..services import BalanceService, LedgerService
from .base import rewards_error_response, storage_error_response

MAX_EXPIRING_DAYS = 365


class PointsOverviewView(APIView):
    """Balance, tier, progress to next tier and statistics"""
    permission_classes = [IsAuthenticated, IsCustomer]

    def get(self, request):
        try:
            return success_response(BalanceService.get_overview(request.user))
        except RewardsError as e:
            return rewards_error_response(e)
        except DatabaseError as e:
            return storage_error_response(e, 'points overview')


class TransactionListView(APIView):
    """Paginated ledger listing, newest first"""
    permission_classes = [IsAuthenticated, IsCustomer]

    def get(self, request):
        query = TransactionQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return error_response('Invalid query parameters', errors=query.errors)

        page = query.validated_data['page']
        page_size = query.validated_data['page_size']
        try:
            transactions = LedgerService.list_for_user(
                request.user, kind=query.validated_data.get('type')
            )
            total = transactions.count()
            start = (page - 1) * page_size
            end = start + page_size
            serializer = RewardTransactionSerializer(transactions[start:end], many=True)
        except DatabaseError as e:
            return storage_error_response(e, 'transaction listing')

        return success_response({
            'transactions': serializer.data,
            'pagination': {
                'page': page,
                'page_size': page_size,
                'total': total,
                'has_next': end < total
            }
        })


class ExpiringPointsView(APIView):
    """Points due to expire within ``?days=`` (default from settings)"""
    permission_classes = [IsAuthenticated, IsCustomer]

    def get(self, request):
        days = request.query_params.get('days')
        if days is not None:
            try:
                days = int(days)
            except (TypeError, ValueError):
                return error_response('days must be an integer')
            if not 1 <= days <= MAX_EXPIRING_DAYS:
                return error_response(f'days must be between 1 and {MAX_EXPIRING_DAYS}')

        try:
            report = BalanceService.get_expiring_soon(request.user, within_days=days)
        except DatabaseError as e:
            return storage_error_response(e, 'expiring points')

        return success_response({
            'total_expiring': report['total_expiring'],
            'nearest_expiry': report['nearest_expiry'],
            'within_days': report['within_days'],
            'transactions': ExpiringTransactionSerializer(report['transactions'], many=True).data,
        })
