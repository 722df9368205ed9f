from django.conf import settings
from django.db import models


class Booking(models.Model):
    """Property stay booking; earns reward points once confirmed"""
    STATUS_PENDING = 'pending'
    STATUS_PENDING_APPROVAL = 'pending_approval'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PENDING_APPROVAL, 'Pending Approval'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='bookings')
    property_title = models.CharField(max_length=200)
    start_date = models.DateField()
    end_date = models.DateField()
    guest_count = models.PositiveIntegerField(default=1)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    points_earned = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-created_at']
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'

    def __str__(self):
        return f"Booking #{self.pk} - {self.property_title}"

    @property
    def is_cancelled(self):
        return self.status == self.STATUS_CANCELLED
