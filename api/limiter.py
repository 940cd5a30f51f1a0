"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in both api/main.py (to mount as middleware) and the routers
under api/routes/v1/ (to apply per-route limits with @limiter.limit()).

Using a single shared instance ensures all routes share the same in-memory
counter store. If this were instantiated in each module separately, each
module would get its own isolated counter and rate limits would never trigger.

Limits come from Settings: API_RATE_LIMIT applies to every route through
SlowAPIMiddleware, AUTH_RATE_LIMIT is the stricter per-route limit on the
credential endpoints (brute-force mitigation).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings


def auth_limit() -> str:
    """Limit string for /auth/* credential endpoints, read at request time."""
    return get_settings().auth_rate_limit


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[get_settings().api_rate_limit],
    storage_uri="memory://",
)
