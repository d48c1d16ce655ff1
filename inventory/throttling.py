"""Custom throttles for stock endpoints.

Overrides DRF's ScopedRateThrottle rate lookup to read from Django settings
at request-time, so tests using override_settings reliably affect rates.
Requests are keyed by user or client IP, never by a value the body supplies.
"""

from django.conf import settings
from rest_framework.throttling import ScopedRateThrottle


class StockScopedRateThrottle(ScopedRateThrottle):
    def get_rate(self):
        rf = getattr(settings, "REST_FRAMEWORK", {})
        rates = rf.get("DEFAULT_THROTTLE_RATES", {})
        return rates.get(self.scope)
