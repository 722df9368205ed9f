"""
Booking views module.
"""
from .booking_views import BookingConfirmView, BookingCancelView
from .reservation_views import ReservationCreateView, ReservationCancelView

__all__ = [
    'BookingConfirmView',
    'BookingCancelView',
    'ReservationCreateView',
    'ReservationCancelView',
]
