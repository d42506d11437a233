from winmix.api.rate_limit import FixedWindowRateLimiter, RateLimitResult
