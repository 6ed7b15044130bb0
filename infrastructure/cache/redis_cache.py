import json
from datetime import datetime
from decimal import Decimal

from redis import asyncio as redis
from redis.exceptions import RedisError

from domain.exceptions.currency import CacheError
from domain.models.currency import AveragedRate
from infrastructure.cache.base import DEFAULT_FIELD, RateCache


def _serialize(rate: AveragedRate) -> dict:
    return {
        "id": rate.id,
        "currency": rate.currency,
        "buy_rate": str(rate.buy_rate),
        "sell_rate": str(rate.sell_rate),
        "timestamp": rate.timestamp.isoformat(),
    }


def _deserialize(rate_dict: dict) -> AveragedRate:
    return AveragedRate(
        id=rate_dict.get("id"),
        currency=rate_dict["currency"],
        buy_rate=Decimal(rate_dict["buy_rate"]),
        sell_rate=Decimal(rate_dict["sell_rate"]),
        timestamp=datetime.fromisoformat(rate_dict["timestamp"]),
    )


class RedisRateCache(RateCache):
    """Rate cache stored as one Redis hash per currency, without expiry."""

    def __init__(self, redis_client: redis.Redis, name: str):
        super().__init__(name)
        self.redis = redis_client

    def _make_key(self, currency: str) -> str:
        return f"{self.name}:{currency}"

    async def get(self, currency: str, field: str = DEFAULT_FIELD) -> list[AveragedRate] | None:
        key = self._make_key(currency)
        try:
            data = await self.redis.hget(key, field)
        except RedisError as e:
            raise CacheError(f"Failed to read {key}: {e}") from e

        if data is None:
            return None

        try:
            return [_deserialize(item) for item in json.loads(data)]
        except (ValueError, KeyError, TypeError, ArithmeticError) as e:
            raise CacheError(f"Invalid json data in {key}[{field}]") from e

    async def put(self, currency: str, rates: list[AveragedRate], field: str = DEFAULT_FIELD) -> None:
        key = self._make_key(currency)
        try:
            await self.redis.hset(key, field, json.dumps([_serialize(r) for r in rates]))
        except RedisError as e:
            raise CacheError(f"Failed to write {key}: {e}") from e

    async def invalidate(self, currency: str) -> None:
        key = self._make_key(currency)
        try:
            await self.redis.delete(key)
        except RedisError as e:
            raise CacheError(f"Failed to invalidate {key}: {e}") from e
