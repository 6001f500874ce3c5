"""
============================================================================
FILE: limiter.py
LOCATION: gateway/limiter.py
============================================================================

PURPOSE:
    Provide a shared SlowAPI limiter instance for the gateway.

ROLE IN PROJECT:
    Per-IP request throttling in front of every route. This is separate
    from the per-user daily quota in quota.py, which counts gated actions.

KEY COMPONENTS:
    - limiter: SlowAPI Limiter configured with default request limits

DEPENDENCIES:
    - External: slowapi
    - Internal: config.py

USAGE:
    from gateway.limiter import limiter
============================================================================
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from gateway import config


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[config.RATE_LIMIT_DEFAULT],
    enabled=config.RATE_LIMIT_ENABLED,
)
