import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from domain.exceptions.currency import CacheError
from domain.models.currency import AveragedRate
from infrastructure.cache.base import DEFAULT_FIELD, RateCache
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.rate import RateRepository

logger = logging.getLogger(__name__)

LAST_RATE_CACHE = 'last_rate'
HOURLY_RATES_CACHE = 'hourly_rates'
DAILY_RATES_CACHE = 'daily_rates'
CACHE_NAMES = (LAST_RATE_CACHE, HOURLY_RATES_CACHE, DAILY_RATES_CACHE)


class CachedRateReader:
	"""Read-through caches in front of the rate repository queries.

	Entries are filled on a miss and live until the currency is invalidated
	by a write.

	Each invalidation bumps a per-currency generation. A miss that started
	before the bump does not keep its result. A cache whose invalidation
	failed is cleared again before it serves that currency.
	"""

	def __init__(
		self,
		database: Database,
		last_rate_cache: RateCache,
		hourly_rates_cache: RateCache,
		daily_rates_cache: RateCache,
	):
		self.database = database
		self.last_rate_cache = last_rate_cache
		self.hourly_rates_cache = hourly_rates_cache
		self.daily_rates_cache = daily_rates_cache
		self._generations: dict[str, int] = {}
		self._pending_invalidations: set[tuple[str, str]] = set()

	@classmethod
	def with_caches(cls, database: Database, cache_factory: Callable[[str], RateCache]) -> 'CachedRateReader':
		return cls(database, *(cache_factory(name) for name in CACHE_NAMES))

	@property
	def caches(self) -> list[RateCache]:
		return [self.last_rate_cache, self.hourly_rates_cache, self.daily_rates_cache]

	async def _read_through(
		self,
		cache: RateCache,
		currency: str,
		field: str,
		query: Callable[[RateRepository], Awaitable[list[AveragedRate]]],
	) -> list[AveragedRate]:
		if (cache.name, currency) in self._pending_invalidations:
			await cache.invalidate(currency)
			self._pending_invalidations.discard((cache.name, currency))
			logger.info(f'Cleared {cache.name} for {currency} after an earlier failed invalidation')

		generation = self._generations.get(currency, 0)
		cached = await cache.get(currency, field)
		if cached is not None:
			logger.debug(f'Cache {cache.name} HIT for {currency}[{field}]')
			return cached

		logger.debug(f'Cache {cache.name} MISS for {currency}[{field}]')
		async with self.database.session() as session:
			rates = await query(RateRepository(session))

		if self._generations.get(currency, 0) != generation:
			logger.debug(f'Rates for {currency} changed during the query, not caching {cache.name}')
			return rates

		await cache.put(currency, rates, field)
		if self._generations.get(currency, 0) != generation:
			# Invalidated while the put was in flight.
			await cache.invalidate(currency)
		return rates

	async def most_recent(self, currency: str) -> AveragedRate | None:
		rates = await self._read_through(
			self.last_rate_cache, currency, DEFAULT_FIELD, lambda repo: repo.get_latest(currency, limit=1)
		)
		return rates[0] if rates else None

	async def most_recent_two(self, currency: str) -> list[AveragedRate]:
		return await self._read_through(
			self.hourly_rates_cache, currency, DEFAULT_FIELD, lambda repo: repo.get_latest(currency, limit=2)
		)

	async def since_timestamp(self, currency: str, since: datetime) -> list[AveragedRate]:
		return await self._read_through(
			self.daily_rates_cache, currency, since.isoformat(), lambda repo: repo.get_since(currency, since)
		)

	async def invalidate(self, currency: str) -> None:
		"""Drop every cached read for ``currency``.

		Cache failures are logged, not raised. The failed cache is cleared
		on its next read for ``currency``.
		"""
		self._generations[currency] = self._generations.get(currency, 0) + 1
		for cache in self.caches:
			try:
				await cache.invalidate(currency)
			except CacheError as e:
				self._pending_invalidations.add((cache.name, currency))
				logger.error(f'Failed to invalidate {cache.name} for {currency}: {e}')
		logger.debug(f'Invalidated cached rates for {currency}')
