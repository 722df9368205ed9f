"""
Booking status views.

Property admins and staff confirm bookings, which earns the guest their
points. Guests may only cancel their own bookings.
"""
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework import status

from apps.common.utils import success_response, error_response
from apps.rewards.exceptions import RewardsError
from ..models import Booking
from ..permissions import IsPropertyAdmin
from ..serializers import BookingSerializer
from ..services import BookingService


def _owned_booking(request, pk):
    return Booking.objects.filter(pk=pk, user=request.user).first()


class BookingConfirmView(APIView):
    """Confirm a booking and earn its reward points for the guest"""
    permission_classes = [IsAuthenticated, IsPropertyAdmin]

    def post(self, request, pk):
        booking = Booking.objects.filter(pk=pk).first()
        if booking is None:
            return error_response('Booking not found', status_code=status.HTTP_404_NOT_FOUND)

        try:
            booking, earn = BookingService.confirm(booking)
        except ValueError as e:
            return error_response(str(e))
        except RewardsError as e:
            return error_response(e.message, errors={'error': e.code}, status_code=e.status_code)

        return success_response(BookingSerializer(booking).data, 'Booking confirmed')


class BookingCancelView(APIView):
    """Cancel a booking and reverse its reward points"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        booking = _owned_booking(request, pk)
        if booking is None:
            return error_response('Booking not found', status_code=status.HTTP_404_NOT_FOUND)

        try:
            booking, deduct = BookingService.cancel(booking)
        except RewardsError as e:
            return error_response(e.message, errors={'error': e.code}, status_code=e.status_code)

        data = BookingSerializer(booking).data
        data['points_reversed'] = deduct.points if deduct else 0
        return success_response(data, 'Booking cancelled')
