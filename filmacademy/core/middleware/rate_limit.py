"""Rate limiting.

slowapi limiter keyed on client address; replaced by a no-op under APP_ENV=test so
fixtures can hammer endpoints without tripping limits.
"""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from filmacademy.core.config import settings


class _NoOpLimiter:
    """Pass-through limiter used in tests."""

    def limit(self, *args, **kwargs):
        def decorator(func):
            return func

        return decorator


if os.getenv("APP_ENV", settings.environment).lower() == "test":
    limiter = _NoOpLimiter()
else:
    limiter = Limiter(
        key_func=get_remote_address, default_limits=["300 per minute", "5000 per day"]
    )
