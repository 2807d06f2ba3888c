"""
api/limiter.py -- Per-IP slowapi limiter for the credential endpoints.

api/main.py mounts it (SlowAPIMiddleware + app.state.limiter) and
api/routes/v1/auth.py decorates register/login with @limiter.limit().
Both must share this one instance; separate instances keep separate
counters and the limit would never trip.

Scope is brute-force protection keyed by client address. The weather
route's global quota is a different mechanism: core.rate_guard.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
