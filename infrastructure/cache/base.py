from abc import ABC, abstractmethod

from domain.models.currency import AveragedRate

DEFAULT_FIELD = 'default'


class RateCache(ABC):
    """A named cache of rate query results, one entry per currency.

    ``field`` separates different arguments of the same query inside a
    currency's entry; ``invalidate`` drops every field for that currency.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get(self, currency: str, field: str = DEFAULT_FIELD) -> list[AveragedRate] | None:
        ...

    @abstractmethod
    async def put(self, currency: str, rates: list[AveragedRate], field: str = DEFAULT_FIELD) -> None:
        ...

    @abstractmethod
    async def invalidate(self, currency: str) -> None:
        ...
