from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.exceptions.currency import StorageError
from domain.models.currency import AveragedRate
from infrastructure.persistence.models.rate import AverageRateDB


def _to_domain(row: AverageRateDB) -> AveragedRate:
	return AveragedRate(
		id=row.id,
		currency=row.currency,
		buy_rate=row.buy_rate,
		sell_rate=row.sell_rate,
		timestamp=row.timestamp,
	)


class RateRepository:
	"""Append-only store of averaged rates, queried per currency."""

	def __init__(self, db_session: AsyncSession):
		self.db_session = db_session

	async def add(self, rate: AveragedRate) -> AveragedRate:
		row = AverageRateDB(
			currency=rate.currency,
			buy_rate=rate.buy_rate,
			sell_rate=rate.sell_rate,
			timestamp=rate.timestamp,
		)
		try:
			self.db_session.add(row)
			await self.db_session.flush()
		except SQLAlchemyError as e:
			raise StorageError(f'Failed to save average rate for {rate.currency}: {e}') from e

		return _to_domain(row)

	async def _fetch(self, stmt) -> list[AveragedRate]:
		try:
			result = await self.db_session.execute(stmt)
		except SQLAlchemyError as e:
			raise StorageError(f'Failed to query average rates: {e}') from e
		return [_to_domain(r) for r in result.scalars().all()]

	async def get_latest(self, currency: str, limit: int = 1) -> list[AveragedRate]:
		"""Most recent records first."""
		stmt = (
			select(AverageRateDB)
			.filter(AverageRateDB.currency == currency)
			.order_by(AverageRateDB.timestamp.desc(), AverageRateDB.id.desc())
			.limit(limit)
		)
		return await self._fetch(stmt)

	async def get_since(self, currency: str, since: datetime) -> list[AveragedRate]:
		"""Records with ``timestamp >= since``, oldest first."""
		stmt = (
			select(AverageRateDB)
			.filter(
				AverageRateDB.currency == currency,
				AverageRateDB.timestamp >= since,
			)
			.order_by(AverageRateDB.timestamp.asc(), AverageRateDB.id.asc())
		)
		return await self._fetch(stmt)
