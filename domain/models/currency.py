from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

SUPPORTED_CURRENCIES = ('USD', 'EUR')
BASE_CURRENCY = 'UAH'


@dataclass(frozen=True)
class Quote:
	currency: str
	base_currency: str
	buy_rate: Decimal
	sell_rate: Decimal
	source: str


@dataclass(frozen=True)
class AveragedRate:
	currency: str
	buy_rate: Decimal
	sell_rate: Decimal
	timestamp: datetime
	id: int | None = None


@dataclass(frozen=True)
class RateChange:
	timestamp: datetime
	change: Decimal  # Percent relative to the previous record

	def describe(self) -> str:
		return f'Time: {self.timestamp.isoformat()}, change: {self.change}%'
