from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class RewardTransaction(models.Model):
    """
    One entry of the reward points ledger.

    Rows are append-only: after creation only ``status`` may change, from
    ``active`` to ``reversed``. ``points`` is always a positive magnitude and
    ``direction`` says whether the entry credits or debits the owner.
    """
    KIND_EARN = 'earn'
    KIND_REDEEM = 'redeem'
    KIND_TRANSFER = 'transfer'
    KIND_DEDUCT = 'deduct'
    KIND_CHOICES = [
        (KIND_EARN, 'Earned'),
        (KIND_REDEEM, 'Redeemed'),
        (KIND_TRANSFER, 'Transfer'),
        (KIND_DEDUCT, 'Deducted'),
    ]

    DIRECTION_IN = 'in'
    DIRECTION_OUT = 'out'
    DIRECTION_CHOICES = [
        (DIRECTION_IN, 'Credit'),
        (DIRECTION_OUT, 'Debit'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_REVERSED = 'reversed'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_REVERSED, 'Reversed'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reward_transactions'
    )
    points = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    kind = models.CharField(max_length=10, choices=KIND_CHOICES)
    direction = models.CharField(max_length=3, choices=DIRECTION_CHOICES)
    description = models.CharField(max_length=255)
    # Transfers: sender row points at the recipient and vice versa
    counterparty = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    related_booking = models.ForeignKey(
        'bookings.Booking', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='reward_transactions'
    )
    related_reservation = models.ForeignKey(
        'bookings.RestaurantReservation', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='reward_transactions'
    )
    # Set on the offsetting deduct; unique, so a credit can be reversed once
    reversal_of = models.OneToOneField(
        'self', on_delete=models.PROTECT, null=True, blank=True, related_name='reversal'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    expiry_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'reward_transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'status', 'kind'], name='reward_tx_user_status_kind'),
            models.Index(fields=['status', 'expiry_date'], name='reward_tx_status_expiry'),
        ]
        verbose_name = 'Reward Transaction'
        verbose_name_plural = 'Reward Transactions'

    def __str__(self):
        sign = '+' if self.is_credit else '-'
        return f"{self.user_id}: {sign}{self.points} points ({self.get_kind_display()})"

    @property
    def is_credit(self):
        return self.direction == self.DIRECTION_IN

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def signed_points(self):
        """Balance effect of this entry"""
        return self.points if self.is_credit else -self.points
