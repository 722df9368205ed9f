"""
Reward transaction serializers for ledger listings.
"""
from rest_framework import serializers
from ..models import RewardTransaction


class RewardTransactionSerializer(serializers.ModelSerializer):
    """
    Serializer for ledger entries.
    Used for: GET /api/rewards/transactions/
    """
    kind_display = serializers.CharField(source='get_kind_display', read_only=True)
    counterparty_email = serializers.EmailField(source='counterparty.email', read_only=True)
    signed_points = serializers.IntegerField(read_only=True)

    class Meta:
        model = RewardTransaction
        fields = [
            'id', 'kind', 'kind_display', 'direction', 'points', 'signed_points',
            'description', 'status', 'counterparty', 'counterparty_email',
            'related_booking', 'related_reservation', 'reversal_of',
            'expiry_date', 'created_at'
        ]
        read_only_fields = fields


class ExpiringTransactionSerializer(serializers.ModelSerializer):
    """Credits listed in the expiring-soon report"""

    class Meta:
        model = RewardTransaction
        fields = ['id', 'kind', 'points', 'description', 'expiry_date']
        read_only_fields = fields
