from .base import RateCache
from .memory_cache import InMemoryRateCache
from .redis_cache import RedisRateCache

__all__ = ['RateCache', 'InMemoryRateCache', 'RedisRateCache']
