from domain.models.currency import AveragedRate
from infrastructure.cache.base import DEFAULT_FIELD, RateCache


class InMemoryRateCache(RateCache):
    """Process-local rate cache for single-instance deployments."""

    def __init__(self, name: str):
        super().__init__(name)
        self._entries: dict[str, dict[str, list[AveragedRate]]] = {}

    async def get(self, currency: str, field: str = DEFAULT_FIELD) -> list[AveragedRate] | None:
        rates = self._entries.get(currency, {}).get(field)
        return list(rates) if rates is not None else None

    async def put(self, currency: str, rates: list[AveragedRate], field: str = DEFAULT_FIELD) -> None:
        self._entries.setdefault(currency, {})[field] = list(rates)

    async def invalidate(self, currency: str) -> None:
        self._entries.pop(currency, None)
