from .aggregator import RateAggregator
from .analytics_service import AnalyticsService
from .rate_reader import CachedRateReader
from .rate_service import RateService
from .scheduler import RateUpdateScheduler, SchedulerState

__all__ = [
	'AnalyticsService',
	'CachedRateReader',
	'RateAggregator',
	'RateService',
	'RateUpdateScheduler',
	'SchedulerState',
]
