"""
Access to the rewards settings with defaults applied.
"""
from django.conf import settings

DEFAULTS = {
    'BOOKING_POINTS_PER_UNIT': 2,
    'RESERVATION_POINTS': 100,
    'TRANSFER_EXPIRY_DAYS': 365,
    'EARN_EXPIRY_DAYS': None,
    'EXPIRING_WINDOW_DAYS': 30,
}


def get_rewards_setting(name):
    """Read a REWARDS_CONFIG key, falling back to the built-in default"""
    config = getattr(settings, 'REWARDS_CONFIG', {})
    if name in config:
        return config[name]
    return DEFAULTS[name]
