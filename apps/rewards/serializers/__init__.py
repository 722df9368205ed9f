"""
Rewards serializers module.
"""
from .transaction_serializers import RewardTransactionSerializer, ExpiringTransactionSerializer
from .request_serializers import RedeemSerializer, TransferSerializer, TransactionQuerySerializer

__all__ = [
    'RewardTransactionSerializer',
    'ExpiringTransactionSerializer',
    'RedeemSerializer',
    'TransferSerializer',
    'TransactionQuerySerializer',
]
