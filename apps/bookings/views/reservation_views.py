"""
Restaurant reservation views.
"""
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework import status

from apps.common.utils import success_response, error_response
from apps.rewards.exceptions import RewardsError
from ..models import RestaurantReservation
from ..serializers import RestaurantReservationSerializer
from ..services import ReservationService


class ReservationCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = RestaurantReservationSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Invalid reservation', errors=serializer.errors)

        reservation, earn = ReservationService.create(user=request.user, **serializer.validated_data)
        return success_response(
            RestaurantReservationSerializer(reservation).data,
            'Reservation created',
            status.HTTP_201_CREATED
        )


class ReservationCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        reservation = RestaurantReservation.objects.filter(pk=pk, user=request.user).first()
        if reservation is None:
            return error_response('Reservation not found', status_code=status.HTTP_404_NOT_FOUND)

        try:
            reservation, deduct = ReservationService.cancel(reservation)
        except RewardsError as e:
            return error_response(e.message, errors={'error': e.code}, status_code=e.status_code)

        data = RestaurantReservationSerializer(reservation).data
        data['points_reversed'] = deduct.points if deduct else 0
        return success_response(data, 'Reservation cancelled')
