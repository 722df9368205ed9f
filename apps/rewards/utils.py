"""
Small helpers shared by the rewards services.
"""
from django.utils.text import Truncator


def user_pk(user_or_id):
    """Accept a user instance or a bare primary key"""
    return getattr(user_or_id, 'pk', user_or_id)


def ledger_description(text):
    """Fit free text into RewardTransaction.description"""
    from .models import RewardTransaction

    max_length = RewardTransaction._meta.get_field('description').max_length
    return Truncator(text).chars(max_length)
