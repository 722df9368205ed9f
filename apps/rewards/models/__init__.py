"""
Rewards models module.
"""
from .transaction import RewardTransaction

__all__ = [
    'RewardTransaction',
]
