import logging

from redis.asyncio import Redis

from application.services import (
	AnalyticsService,
	CachedRateReader,
	RateAggregator,
	RateService,
	RateUpdateScheduler,
)
from config.settings import Settings, get_settings
from infrastructure.cache import InMemoryRateCache, RateCache, RedisRateCache
from infrastructure.persistence.database import Database
from infrastructure.providers import MonoBankProvider, PrivatBankProvider

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	redis_client: Redis | None = None
	privatbank: PrivatBankProvider | None = None
	monobank: MonoBankProvider | None = None
	reader: CachedRateReader | None = None
	aggregator: RateAggregator | None = None
	rate_service: RateService | None = None
	analytics_service: AnalyticsService | None = None
	scheduler: RateUpdateScheduler | None = None


deps = AppDependencies()


def _cache_factory(settings: Settings):
	if settings.CACHE_BACKEND == 'memory':
		return InMemoryRateCache

	if settings.CACHE_BACKEND != 'redis':
		raise ValueError(f'Unknown cache backend: {settings.CACHE_BACKEND}')

	deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)

	def build(name: str) -> RateCache:
		return RedisRateCache(deps.redis_client, name)

	return build


def init_dependencies(settings: Settings | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = settings or get_settings()

	deps.db = Database(settings.DATABASE_URL)
	deps.reader = CachedRateReader.with_caches(deps.db, _cache_factory(settings))
	logger.info(f'Using {settings.CACHE_BACKEND} rate cache')

	deps.privatbank = PrivatBankProvider(url=settings.PRIVATBANK_URL, timeout=settings.PROVIDER_TIMEOUT)
	deps.monobank = MonoBankProvider(
		url=settings.MONOBANK_URL,
		timeout=settings.PROVIDER_TIMEOUT,
		max_retries=settings.MONOBANK_MAX_RETRIES,
		retry_delay=settings.MONOBANK_RETRY_DELAY_SECONDS,
	)

	deps.aggregator = RateAggregator(database=deps.db, reader=deps.reader)
	deps.rate_service = RateService(
		primary_provider=deps.privatbank,
		secondary_provider=deps.monobank,
		aggregator=deps.aggregator,
		reader=deps.reader,
	)
	deps.analytics_service = AnalyticsService(reader=deps.reader)
	deps.scheduler = RateUpdateScheduler(
		rate_service=deps.rate_service, interval_seconds=settings.FETCH_INTERVAL_SECONDS
	)
	logger.info('Dependencies initialized')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.scheduler:
		await deps.scheduler.stop()
	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.db:
		await deps.db.close()
	for provider in (deps.privatbank, deps.monobank):
		if provider:
			await provider.close()

	logger.info('Cleanup complete')


def get_rate_service() -> RateService:
	if deps.rate_service is None:
		raise RuntimeError('Rate service not initialized')
	return deps.rate_service


def get_analytics_service() -> AnalyticsService:
	if deps.analytics_service is None:
		raise RuntimeError('Analytics service not initialized')
	return deps.analytics_service


def get_scheduler() -> RateUpdateScheduler:
	if deps.scheduler is None:
		raise RuntimeError('Scheduler not initialized')
	return deps.scheduler
