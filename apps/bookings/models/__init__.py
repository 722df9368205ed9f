"""
Booking models module.
"""
from .booking import Booking
from .reservation import RestaurantReservation

__all__ = [
    'Booking',
    'RestaurantReservation',
]
