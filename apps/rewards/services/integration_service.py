"""
Rewards integration service: how bookings and reservations earn points.
"""
from datetime import timedelta
from decimal import Decimal, ROUND_FLOOR

from django.utils import timezone

from ..conf import get_rewards_setting
from ..models import RewardTransaction
from .ledger_service import LedgerService


class RewardsIntegrationService:
    """Translate booking events into ledger writes"""

    @staticmethod
    def calculate_booking_points(total_price):
        """floor(total_price x BOOKING_POINTS_PER_UNIT)"""
        rate = Decimal(str(get_rewards_setting('BOOKING_POINTS_PER_UNIT')))
        points = (Decimal(str(total_price)) * rate).to_integral_value(rounding=ROUND_FLOOR)
        return max(int(points), 0)

    @staticmethod
    def calculate_reservation_points():
        return get_rewards_setting('RESERVATION_POINTS')

    @staticmethod
    def _earn_expiry():
        days = get_rewards_setting('EARN_EXPIRY_DAYS')
        if days:
            return timezone.now() + timedelta(days=days)
        return None

    @staticmethod
    def active_earn_for_booking(booking):
        return RewardTransaction.objects.filter(
            related_booking=booking,
            kind=RewardTransaction.KIND_EARN,
            status=RewardTransaction.STATUS_ACTIVE,
        ).first()

    @staticmethod
    def active_earn_for_reservation(reservation):
        return RewardTransaction.objects.filter(
            related_reservation=reservation,
            kind=RewardTransaction.KIND_EARN,
            status=RewardTransaction.STATUS_ACTIVE,
        ).first()

    @staticmethod
    def handle_booking_confirmed(booking):
        """Credit a confirmed booking once; returns the earn entry or None"""
        existing = RewardsIntegrationService.active_earn_for_booking(booking)
        if existing:
            return existing

        points = RewardsIntegrationService.calculate_booking_points(booking.total_price)
        if points <= 0:
            return None

        return LedgerService.record_earn(
            user=booking.user,
            points=points,
            description=f"Booking #{booking.pk}: {booking.property_title}",
            related_booking=booking,
            expiry_date=RewardsIntegrationService._earn_expiry(),
        )

    @staticmethod
    def handle_booking_cancelled(booking):
        """Reverse the booking's earn if there is one; returns the deduct or None"""
        earn = RewardsIntegrationService.active_earn_for_booking(booking)
        if earn is None:
            return None
        return LedgerService.reverse(earn.pk, description=f"Booking #{booking.pk} cancelled")

    @staticmethod
    def handle_reservation_created(reservation):
        points = RewardsIntegrationService.calculate_reservation_points()
        if not points:
            return None

        return LedgerService.record_earn(
            user=reservation.user,
            points=points,
            description=f"Restaurant reservation at {reservation.restaurant_name}",
            related_reservation=reservation,
            expiry_date=RewardsIntegrationService._earn_expiry(),
        )

    @staticmethod
    def handle_reservation_cancelled(reservation):
        earn = RewardsIntegrationService.active_earn_for_reservation(reservation)
        if earn is None:
            return None
        return LedgerService.reverse(
            earn.pk, description=f"Reservation at {reservation.restaurant_name} cancelled"
        )
