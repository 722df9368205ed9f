from django.conf import settings
from django.db import models


class RestaurantReservation(models.Model):
    """Restaurant table reservation; earns a flat reward on creation"""
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='restaurant_reservations'
    )
    restaurant_name = models.CharField(max_length=200)
    reservation_at = models.DateTimeField()
    party_size = models.PositiveIntegerField()
    special_requests = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    points_earned = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'restaurant_reservations'
        ordering = ['-created_at']
        verbose_name = 'Restaurant Reservation'
        verbose_name_plural = 'Restaurant Reservations'

    def __str__(self):
        return f"Reservation #{self.pk} - {self.restaurant_name}"

    @property
    def is_cancelled(self):
        return self.status == self.STATUS_CANCELLED
