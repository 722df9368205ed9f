"""
Booking lifecycle transitions that earn or reverse reward points.
"""
import logging

from django.db import transaction

from apps.rewards.services import RewardsIntegrationService
from ..models import Booking

logger = logging.getLogger(__name__)


class BookingService:
    """Service class for booking status changes"""

    @staticmethod
    def confirm(booking):
        """
        Confirm a booking and credit its reward points.

        Confirming twice does not credit twice. Returns ``(booking, earn)``
        where ``earn`` is the booking's earn entry, or None when the price
        yields no points.
        """
        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=booking.pk)
            if booking.status == Booking.STATUS_CANCELLED:
                raise ValueError("Cancelled bookings cannot be confirmed")

            if booking.status != Booking.STATUS_COMPLETED:
                booking.status = Booking.STATUS_CONFIRMED
            earn = RewardsIntegrationService.handle_booking_confirmed(booking)
            booking.points_earned = earn.points if earn else 0
            booking.save(update_fields=['status', 'points_earned', 'updated_at'])

        logger.info(f"Booking {booking.pk} confirmed, points_earned={booking.points_earned}")
        return booking, earn

    @staticmethod
    def cancel(booking):
        """
        Cancel a booking and reverse the points it earned.

        Cancelling an already cancelled booking is a no-op. If the earned
        points have been spent, InsufficientBalance propagates and the
        booking stays as it was.
        """
        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=booking.pk)
            if booking.status == Booking.STATUS_CANCELLED:
                return booking, None

            deduct = RewardsIntegrationService.handle_booking_cancelled(booking)
            booking.status = Booking.STATUS_CANCELLED
            booking.save(update_fields=['status', 'updated_at'])

        logger.info(f"Booking {booking.pk} cancelled, points_reversed={deduct.points if deduct else 0}")
        return booking, deduct
