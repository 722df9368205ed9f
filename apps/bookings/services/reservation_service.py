"""
Restaurant reservation lifecycle with its flat reward.
"""
import logging

from django.db import transaction

from apps.rewards.services import RewardsIntegrationService
from ..models import RestaurantReservation

logger = logging.getLogger(__name__)


class ReservationService:
    """Service class for restaurant reservations"""

    @staticmethod
    def create(user, restaurant_name, reservation_at, party_size, special_requests=''):
        """Create a reservation and credit the reservation reward in one transaction"""
        with transaction.atomic():
            reservation = RestaurantReservation.objects.create(
                user=user,
                restaurant_name=restaurant_name,
                reservation_at=reservation_at,
                party_size=party_size,
                special_requests=special_requests,
            )
            earn = RewardsIntegrationService.handle_reservation_created(reservation)
            if earn:
                reservation.points_earned = earn.points
                reservation.save(update_fields=['points_earned'])

        logger.info(f"Reservation {reservation.pk} created for user {user.pk}, points_earned={reservation.points_earned}")
        return reservation, earn

    @staticmethod
    def cancel(reservation):
        with transaction.atomic():
            reservation = RestaurantReservation.objects.select_for_update().get(pk=reservation.pk)
            if reservation.status == RestaurantReservation.STATUS_CANCELLED:
                return reservation, None

            deduct = RewardsIntegrationService.handle_reservation_cancelled(reservation)
            reservation.status = RestaurantReservation.STATUS_CANCELLED
            reservation.save(update_fields=['status'])

        logger.info(f"Reservation {reservation.pk} cancelled, points_reversed={deduct.points if deduct else 0}")
        return reservation, deduct
