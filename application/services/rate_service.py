import logging

from application.services.aggregator import RateAggregator
from application.services.rate_reader import CachedRateReader
from domain.exceptions.currency import RateNotFoundError
from domain.models.currency import SUPPORTED_CURRENCIES, AveragedRate
from infrastructure.providers import MonoBankProvider, PrivatBankProvider

logger = logging.getLogger(__name__)


class RateService:
    def __init__(
        self,
        primary_provider: PrivatBankProvider,
        secondary_provider: MonoBankProvider,
        aggregator: RateAggregator,
        reader: CachedRateReader,
        currencies: tuple[str, ...] = SUPPORTED_CURRENCIES,
    ):
        self.primary_provider = primary_provider
        self.secondary_provider = secondary_provider
        self.aggregator = aggregator
        self.reader = reader
        self.currencies = currencies

    async def update_average_rates(self) -> list[AveragedRate]:
        """Fetch both providers and store one averaged rate per currency.

        Steps run one after another; a failure stops the run, keeping any
        rates already saved.
        """
        primary_quotes = await self.primary_provider.fetch_quotes()
        secondary_quotes = await self.secondary_provider.fetch_quotes()

        saved = []
        for currency in self.currencies:
            saved.append(
                await self.aggregator.aggregate(primary_quotes, secondary_quotes, currency)
            )
        return saved

    async def get_latest(self, currency: str) -> AveragedRate:
        currency = currency.upper()
        rate = await self.reader.most_recent(currency)
        if rate is None:
            raise RateNotFoundError(f"Records for currency {currency} not found")
        return rate
