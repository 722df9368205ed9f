"""
Rewards write views: redeem and transfer.
"""
from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.common.utils import success_response, error_response
from apps.bookings.models import Booking
from ..exceptions import NotFound, RewardsError
from ..permissions import IsCustomer
from ..serializers import RedeemSerializer, RewardTransactionSerializer, TransferSerializer
from ..services import BalanceService, LedgerService
from .base import rewards_error_response, storage_error_response


class RedeemPointsView(APIView):
    """Spend points from the caller's balance"""
    permission_classes = [IsAuthenticated, IsCustomer]

    def post(self, request):
        serializer = RedeemSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Invalid redemption request', errors=serializer.errors)

        data = serializer.validated_data
        try:
            booking = None
            if data.get('booking_id'):
                booking = Booking.objects.filter(pk=data['booking_id'], user=request.user).first()
                if booking is None:
                    raise NotFound('Booking not found')
            entry = LedgerService.record_redeem(
                request.user, data['points'], data['description'], related_booking=booking
            )
            balance = BalanceService.get_balance(request.user)
        except RewardsError as e:
            return rewards_error_response(e)
        except DatabaseError as e:
            return storage_error_response(e, 'redeem')

        return success_response({
            'transaction': RewardTransactionSerializer(entry).data,
            'points': balance,
        }, 'Points redeemed successfully', status.HTTP_201_CREATED)


class TransferPointsView(APIView):
    """Send points to another customer by email"""
    permission_classes = [IsAuthenticated, IsCustomer]

    def post(self, request):
        serializer = TransferSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Invalid transfer request', errors=serializer.errors)

        data = serializer.validated_data
        User = get_user_model()
        try:
            recipient = User.objects.filter(email__iexact=data['recipient_email'], is_active=True).first()
            outgoing, incoming = LedgerService.record_transfer(
                request.user, recipient, data['points'], data['description']
            )
            balance = BalanceService.get_balance(request.user)
        except RewardsError as e:
            return rewards_error_response(e)
        except DatabaseError as e:
            return storage_error_response(e, 'transfer')

        return success_response({
            'transaction': RewardTransactionSerializer(outgoing).data,
            'recipient_email': recipient.email,
            'points': balance,
        }, 'Points transferred successfully', status.HTTP_201_CREATED)
