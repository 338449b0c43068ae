"""Rate limiting configuration for API endpoints"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Optional

from tradejournal.config import settings as journal_settings

# Credential endpoints; everything else is unthrottled
LOGIN_LIMIT = "10/minute"
REGISTER_LIMIT = "5/minute"


def get_rate_limit_key(request: Optional[Request] = None) -> str:
    """Get key for rate limiting (handles SlowAPI's no-arg calls during init)"""
    if request is None:
        return "default"
    return get_remote_address(request)


limiter = Limiter(key_func=get_rate_limit_key, enabled=journal_settings.rate_limit_enabled)
