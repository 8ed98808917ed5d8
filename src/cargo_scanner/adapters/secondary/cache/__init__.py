from .price_cache import CacheResource, PriceCache

__all__ = ['CacheResource', 'PriceCache']
