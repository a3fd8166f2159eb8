from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

# Shared by every router; app.main registers it on app.state.
limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().RATE_LIMIT_ENABLED,
)
