from slowapi import Limiter
from slowapi.util import get_remote_address

from gear_exchange.config.settings import settings

# Fixed window counters kept in process memory.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)

# One counter for every route decorated with it (login and register together)
auth_limit = limiter.shared_limit(settings.auth_rate_limit, scope="auth")
