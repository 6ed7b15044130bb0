import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import SQLAlchemyError

from application.services.rate_reader import CachedRateReader
from domain.exceptions.currency import StorageError
from domain.models.currency import AveragedRate, Quote
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.rate import RateRepository

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0')


def _first_match(quotes: list[Quote], currency: str) -> Quote | None:
    return next((q for q in quotes if q.currency.upper() == currency), None)


def _average(a: Decimal, b: Decimal) -> Decimal:
    return ((a + b) / 2).quantize(CENT, rounding=ROUND_HALF_UP)


class RateAggregator:
    """Averages both providers' quotes for a currency and persists the result.

    A single lock serializes every aggregation, for all currencies, so records
    within one currency series are written in timestamp order.
    """

    def __init__(
        self,
        database: Database,
        reader: CachedRateReader,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.database = database
        self.reader = reader
        self.clock = clock
        self._lock = asyncio.Lock()

    async def aggregate(
        self, quotes_a: list[Quote], quotes_b: list[Quote], currency: str
    ) -> AveragedRate:
        currency = currency.upper()
        logger.info(f"Saving average rate for currency={currency}")

        async with self._lock:
            quote_a = _first_match(quotes_a, currency)
            quote_b = _first_match(quotes_b, currency)
            if quote_a is None or quote_b is None:
                # A missing side counts as zero, which halves the average.
                logger.warning(
                    f"Missing quote for {currency}: "
                    f"provider A={'ok' if quote_a else 'missing'}, provider B={'ok' if quote_b else 'missing'}"
                )

            buy = _average(
                quote_a.buy_rate if quote_a else ZERO, quote_b.buy_rate if quote_b else ZERO
            )
            sell = _average(
                quote_a.sell_rate if quote_a else ZERO, quote_b.sell_rate if quote_b else ZERO
            )

            rate = AveragedRate(
                currency=currency, buy_rate=buy, sell_rate=sell, timestamp=self.clock()
            )

            try:
                async with self.database.session() as session:
                    saved = await RateRepository(session).add(rate)
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to save average rate for {currency}: {e}") from e

            await self.reader.invalidate(currency)

        logger.info(
            f"Average rate saved: currency={currency}, buyRate={saved.buy_rate}, sellRate={saved.sell_rate}"
        )
        return saved
