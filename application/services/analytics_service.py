import logging
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_CEILING, Decimal

from application.services.rate_reader import CachedRateReader
from domain.exceptions.currency import InsufficientDataError
from domain.models.currency import RateChange

logger = logging.getLogger(__name__)


def percent_change(previous: Decimal, current: Decimal) -> Decimal:
	"""Change from ``previous`` to ``current`` in percent, rounded to 2 places with halves going toward +infinity."""
	return ((current - previous) / previous * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_CEILING)


class AnalyticsService:
	def __init__(self, reader: CachedRateReader, clock: Callable[[], datetime] = datetime.now):
		self.reader = reader
		self.clock = clock

	def _start_of_day(self) -> datetime:
		return self.clock().replace(hour=0, minute=0, second=0, microsecond=0)

	async def hourly_dynamics(self, currency: str) -> list[RateChange]:
		currency = currency.upper()
		logger.debug(f'Retrieving hourly dynamics for currency={currency}')

		rates = await self.reader.since_timestamp(currency, self._start_of_day())
		if len(rates) < 2:
			logger.warning(f'Insufficient data for hourly dynamics per day for currency={currency}')
			raise InsufficientDataError('Insufficient data for hourly dynamics per day')

		dynamics = [
			RateChange(timestamp=current.timestamp, change=percent_change(previous.buy_rate, current.buy_rate))
			for previous, current in zip(rates, rates[1:])
		]

		logger.info(f'Hourly dynamics retrieved for currency={currency}, entries={len(dynamics)}')
		return dynamics

	async def last_hour_change(self, currency: str) -> Decimal:
		currency = currency.upper()
		logger.debug(f'Retrieving last hour change for currency={currency}')

		rates = await self.reader.most_recent_two(currency)
		if len(rates) < 2:
			logger.warning(f'Not enough data for last hour change for currency={currency}')
			raise InsufficientDataError('There are not enough data to calculate the dynamics for the last hour')

		newest, older = rates[0], rates[1]
		change = percent_change(older.buy_rate, newest.buy_rate)
		logger.info(f'Last hour change for currency={currency} is {change}%')
		return change
