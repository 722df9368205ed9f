from django.utils import timezone
from rest_framework import serializers
from .models import Booking, RestaurantReservation


class BookingSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'property_title', 'start_date', 'end_date', 'guest_count',
            'total_price', 'status', 'status_display', 'points_earned',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class RestaurantReservationSerializer(serializers.ModelSerializer):

    class Meta:
        model = RestaurantReservation
        fields = [
            'id', 'restaurant_name', 'reservation_at', 'party_size',
            'special_requests', 'status', 'points_earned', 'created_at'
        ]
        read_only_fields = ['id', 'status', 'points_earned', 'created_at']

    def validate_reservation_at(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Reservation time must be in the future")
        return value

    def validate_party_size(self, value):
        if value < 1:
            raise serializers.ValidationError("Party size must be at least 1")
        return value
