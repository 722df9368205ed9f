"""
Settings package for stay_server.

The concrete module is chosen by the ENVIRONMENT variable
(development, production or test). Development is the default.
"""
from decouple import config

ENVIRONMENT = config('ENVIRONMENT', default='development')

if ENVIRONMENT == 'production':
    from .production import *  # noqa: F401,F403
elif ENVIRONMENT == 'test':
    from .test import *  # noqa: F401,F403
else:
    from .development import *  # noqa: F401,F403
