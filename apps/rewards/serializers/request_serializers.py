"""
Request validation for redeem, transfer and listing endpoints.
"""
from rest_framework import serializers
from ..models import RewardTransaction


class RedeemSerializer(serializers.Serializer):
    """
    Serializer for points redemption requests.
    Used for: POST /api/rewards/redeem/
    """
    points = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    booking_id = serializers.IntegerField(min_value=1, required=False)

    def validate_description(self, value):
        return value.strip()

    def validate(self, attrs):
        if not attrs['description']:
            if attrs.get('booking_id'):
                attrs['description'] = f"Redeemed {attrs['points']} points for booking #{attrs['booking_id']}"
            else:
                attrs['description'] = 'Points redemption'
        return attrs


class TransferSerializer(serializers.Serializer):
    """
    Serializer for peer-to-peer transfers.
    Used for: POST /api/rewards/transfer/
    """
    points = serializers.IntegerField(min_value=1)
    recipient_email = serializers.EmailField()
    description = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')

    def validate_recipient_email(self, value):
        return value.strip().lower()

    def validate_description(self, value):
        return value.strip() or 'Points transfer'


class TransactionQuerySerializer(serializers.Serializer):
    """Query parameters for GET /api/rewards/transactions/"""
    type = serializers.ChoiceField(choices=RewardTransaction.KIND_CHOICES, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    page_size = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
