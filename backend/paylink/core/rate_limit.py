"""
PURPOSE: Rate limiting configuration for the GH Paylink API using slowapi.

Provides a shared Limiter instance keyed by client IP address and
pre-defined rate limit strings for the endpoint categories:
    - PAYMENT_LIMIT: strict   (10/minute), payment initiation, each call hits the gateway
    - READ_LIMIT:    relaxed  (60/minute), listing and status endpoints

Webhook deliveries are not limited: the gateway must never see a 429.

The limiter is process-wide. slowapi binds @limiter.limit decorators to this
instance when the route modules are imported, so every app built in the
process shares its counters and its enabled flag; see configure_limiter().
"""

from fastapi import FastAPI
from slowapi import Limiter
from slowapi.util import get_remote_address

# Shared limiter instance, keyed by client IP
limiter = Limiter(key_func=get_remote_address)

# ── Rate limit tiers ──────────────────────────────────────────
PAYMENT_LIMIT = "10/minute"
READ_LIMIT = "60/minute"


def configure_limiter(app: FastAPI, enabled: bool) -> Limiter:
    """
    PURPOSE: Attach the shared limiter to `app` and switch it on or off.

    CALLED BY: create_app()

    The flag lives on the shared limiter, so it applies to every app in the
    process and the most recent call wins. Counters are cleared on each call
    so a new app never inherits hits recorded for an earlier one.
    """
    limiter.enabled = enabled
    limiter.reset()
    app.state.limiter = limiter
    return limiter
