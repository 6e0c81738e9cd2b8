from .rate_limiter import ClientRateLimiter, RateLimitResult

__all__ = ["ClientRateLimiter", "RateLimitResult"]
