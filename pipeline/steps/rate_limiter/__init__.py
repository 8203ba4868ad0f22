"""
Rate Limiter Step

In-process sliding-window limiter keyed by caller identity and action class.
"""

from .limiter import RateLimiter, caller_identity, rate_limit_headers, strip_port
from .main import RateLimitStep

__all__ = ["RateLimiter", "RateLimitStep", "caller_identity", "rate_limit_headers", "strip_port"]
