"""
Business errors raised by the rewards ledger.

These are expected, recoverable conditions. Views translate them into
4xx responses; storage failures are not wrapped and surface as
django.db.DatabaseError.
"""
from rest_framework import status


class RewardsError(Exception):
    """Base class for ledger business errors"""
    code = 'rewards_error'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Reward points operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InsufficientBalance(RewardsError):
    code = 'insufficient_balance'
    default_message = 'Not enough points'

    def __init__(self, requested=None, available=None, message=None):
        self.requested = requested
        self.available = available
        if message is None and requested is not None and available is not None:
            message = f"Not enough points: requested {requested}, available {available}"
        super().__init__(message)


class InvalidRecipient(RewardsError):
    code = 'invalid_recipient'
    default_message = 'Invalid transfer recipient'


class AlreadyReversed(RewardsError):
    code = 'already_reversed'
    default_message = 'Transaction has already been reversed'


class InvalidReversal(RewardsError):
    code = 'invalid_reversal'
    default_message = 'Only earned points can be reversed'


class NotFound(RewardsError):
    code = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Resource not found'
