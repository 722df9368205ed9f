from django.contrib import admin, messages

from apps.rewards.exceptions import RewardsError
from .models import Booking, RestaurantReservation
from .services import BookingService, ReservationService


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'property_title', 'start_date', 'end_date', 'total_price', 'status', 'points_earned']
    list_filter = ['status', 'start_date', 'created_at']
    search_fields = ['user__username', 'user__email', 'property_title']
    readonly_fields = ['status', 'points_earned', 'created_at', 'updated_at']
    actions = ['confirm_bookings', 'cancel_bookings']

    @admin.action(description='Confirm selected bookings')
    def confirm_bookings(self, request, queryset):
        for booking in queryset:
            try:
                BookingService.confirm(booking)
            except (ValueError, RewardsError) as e:
                self.message_user(request, f"Booking #{booking.pk}: {e}", messages.WARNING)

    @admin.action(description='Cancel selected bookings')
    def cancel_bookings(self, request, queryset):
        for booking in queryset:
            try:
                BookingService.cancel(booking)
            except RewardsError as e:
                self.message_user(request, f"Booking #{booking.pk}: {e.message}", messages.WARNING)


@admin.register(RestaurantReservation)
class RestaurantReservationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'restaurant_name', 'reservation_at', 'party_size', 'status', 'points_earned']
    list_filter = ['status', 'reservation_at']
    search_fields = ['user__username', 'user__email', 'restaurant_name']
    readonly_fields = ['status', 'points_earned', 'created_at']
