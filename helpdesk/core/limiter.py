# helpdesk/core/limiter.py
"""Shared SlowAPI limiter, decorated onto write-heavy endpoints."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
