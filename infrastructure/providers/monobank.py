import logging
from decimal import Decimal

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from domain.exceptions.currency import ProviderError, RateLimitError
from domain.models.currency import BASE_CURRENCY, Quote

logger = logging.getLogger(__name__)

# ISO 4217 numeric codes
UAH_CODE = 980
CURRENCY_CODES = {840: "USD", 978: "EUR"}


class MonoBankProvider:
    BASE_URL = "https://api.monobank.ua/bank/currency"

    def __init__(
        self,
        url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: int = 10,
        max_retries: int = 3,
        retry_delay: float = 5.0,
    ):
        self.url = url or self.BASE_URL
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "monobank"

    async def _request(self) -> list:
        try:
            response = await self._client.get(self.url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError("MonoBank HTTP error 429: Too Many Requests") from e
            raise
        except httpx.RequestError as e:
            raise ProviderError(f"MonoBank request failed: {e.__class__.__name__}") from e
        except Exception as e:
            raise ProviderError(f"MonoBank response parsing error: {str(e)}") from e

        if not isinstance(data, list):
            raise ProviderError("MonoBank response parsing error: expected a list of rates")

        return data

    async def _request_with_retry(self) -> list:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(RateLimitError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._request()
        return []

    async def fetch_quotes(self) -> list[Quote]:
        """Fetch USD and EUR quotes against UAH.

        Rate-limit responses are retried; once retries run out, or on any other
        HTTP error status, the fetch degrades to an empty list.
        """
        logger.debug("Fetching rates from MonoBank API...")
        try:
            data = await self._request_with_retry()
        except RateLimitError:
            logger.error(
                f"429 Too Many Requests from MonoBank API after {self.max_retries + 1} attempts, "
                "continuing without MonoBank quotes"
            )
            return []
        except httpx.HTTPStatusError as e:
            logger.error(
                f"MonoBank HTTP error {e.response.status_code}: {e.response.text[:200]}, "
                "continuing without MonoBank quotes"
            )
            return []

        quotes = []
        for item in data:
            if not isinstance(item, dict):
                continue
            if item.get("currencyCodeB") != UAH_CODE:
                continue
            currency = CURRENCY_CODES.get(item.get("currencyCodeA"))
            if currency is None:
                continue
            if item.get("rateBuy") is None or item.get("rateSell") is None:
                logger.debug(f"Skipping MonoBank {currency} entry without buy/sell rates")
                continue

            try:
                buy_rate = Decimal(str(item["rateBuy"]))
                sell_rate = Decimal(str(item["rateSell"]))
            except ArithmeticError as e:
                raise ProviderError(f"Malformed MonoBank rate entry: {e}") from e

            quotes.append(
                Quote(
                    currency=currency,
                    base_currency=BASE_CURRENCY,
                    buy_rate=buy_rate,
                    sell_rate=sell_rate,
                    source=self.name,
                )
            )

        if not quotes:
            logger.warning("MonoBank returned no USD/EUR quotes")
        else:
            logger.info(f"MonoBank returned {len(quotes)} quotes")
        return quotes

    async def close(self) -> None:
        await self._client.aclose()
