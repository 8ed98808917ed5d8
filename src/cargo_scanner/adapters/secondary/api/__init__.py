from .rate_limiter import RateLimiter
from .uex_client import UexPriceFeed

__all__ = ['RateLimiter', 'UexPriceFeed']
