from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Marketplace user carrying the cached reward points balance"""
    ROLE_USER = 'user'
    ROLE_PROPERTY_ADMIN = 'property_admin'
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_CHOICES = [
        (ROLE_USER, 'Customer'),
        (ROLE_PROPERTY_ADMIN, 'Property Admin'),
        (ROLE_SUPER_ADMIN, 'Super Admin'),
    ]

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_USER)
    # Running balance; written only by apps.rewards.services.LedgerService
    reward_points = models.PositiveIntegerField(default=0)
    avatar = models.URLField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return self.username or self.email or f"User {self.id}"

    @property
    def is_customer(self):
        return self.role == self.ROLE_USER
