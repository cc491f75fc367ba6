"""Rate limiter configuration module.

Kept separate from main.py so routers can import the limiter without
circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from models.config import settings

limiter = Limiter(key_func=get_remote_address)

# Limits applied by the write endpoints
CREATE_COMMUNITY_LIMIT = settings.RATE_LIMIT_CREATE_COMMUNITY
CREATE_REPORT_LIMIT = settings.RATE_LIMIT_CREATE_REPORT
INTERACTION_LIMIT = settings.RATE_LIMIT_INTERACTION
