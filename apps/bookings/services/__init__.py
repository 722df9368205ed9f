"""
Booking services module.
"""
from .booking_service import BookingService
from .reservation_service import ReservationService

__all__ = [
    'BookingService',
    'ReservationService',
]
