import logging
from decimal import Decimal

import httpx

from domain.exceptions.currency import ProviderError
from domain.models.currency import Quote

logger = logging.getLogger(__name__)


class PrivatBankProvider:
	BASE_URL = 'https://api.privatbank.ua/p24api/pubinfo?exchange&coursid=5'

	def __init__(self, url: str | None = None, client: httpx.AsyncClient | None = None, timeout: int = 10):
		self.url = url or self.BASE_URL
		self._client = client or httpx.AsyncClient(timeout=timeout)

	@property
	def name(self) -> str:
		return 'privatbank'

	async def _request(self) -> list:
		try:
			response = await self._client.get(self.url)
			response.raise_for_status()
			data = response.json()
		except httpx.HTTPStatusError as e:
			raise ProviderError(
				f'PrivatBank HTTP error {e.response.status_code}: {e.response.text[:200]}'
			) from e
		except httpx.RequestError as e:
			raise ProviderError(f'PrivatBank request failed: {e.__class__.__name__}') from e
		except Exception as e:
			raise ProviderError(f'PrivatBank response parsing error: {str(e)}') from e

		if not isinstance(data, list) or not data:
			raise ProviderError('PrivatBank returned an empty response')

		return data

	async def fetch_quotes(self) -> list[Quote]:
		logger.debug('Fetching rates from PrivatBank API...')
		data = await self._request()

		try:
			quotes = [
				Quote(
					currency=item['ccy'].upper(),
					base_currency=item['base_ccy'].upper(),
					buy_rate=Decimal(str(item['buy'])),
					sell_rate=Decimal(str(item['sale'])),
					source=self.name,
				)
				for item in data
			]
		except (KeyError, TypeError, AttributeError, ArithmeticError) as e:
			raise ProviderError(f'Malformed PrivatBank rate entry: {e}') from e

		logger.info(f'PrivatBank returned {len(quotes)} quotes')
		return quotes

	async def close(self) -> None:
		await self._client.aclose()
