import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

from sqlalchemy.exc import OperationalError

from domain.exceptions.currency import StorageError
from domain.models.currency import AveragedRate
from infrastructure.persistence.repositories.rate import RateRepository


def make_rate(currency: str, buy: str, timestamp: datetime) -> AveragedRate:
    return AveragedRate(
        currency=currency,
        buy_rate=Decimal(buy),
        sell_rate=Decimal(buy) + Decimal('0.30'),
        timestamp=timestamp,
    )


async def seed(database, *rates: AveragedRate) -> list[AveragedRate]:
    async with database.session() as session:
        repo = RateRepository(session)
        return [await repo.add(rate) for rate in rates]


@pytest.mark.asyncio
async def test_add_assigns_id_and_round_trips(database):
    saved = await seed(database, make_rate('USD', '27.05', datetime(2025, 1, 1, 10, 0)))

    assert saved[0].id is not None

    async with database.session() as session:
        rates = await RateRepository(session).get_latest('USD')

    assert len(rates) == 1
    assert rates[0].id == saved[0].id
    assert rates[0].buy_rate == Decimal('27.05')
    assert rates[0].sell_rate == Decimal('27.35')
    assert rates[0].timestamp == datetime(2025, 1, 1, 10, 0)


@pytest.mark.asyncio
async def test_get_latest_returns_newest_first_and_respects_limit(database):
    await seed(
        database,
        make_rate('USD', '27.00', datetime(2025, 1, 1, 9, 0)),
        make_rate('USD', '27.10', datetime(2025, 1, 1, 10, 0)),
        make_rate('USD', '27.20', datetime(2025, 1, 1, 11, 0)),
        make_rate('EUR', '30.00', datetime(2025, 1, 1, 12, 0)),
    )

    async with database.session() as session:
        repo = RateRepository(session)
        latest = await repo.get_latest('USD')
        latest_two = await repo.get_latest('USD', limit=2)

    assert [r.buy_rate for r in latest] == [Decimal('27.20')]
    assert [r.buy_rate for r in latest_two] == [Decimal('27.20'), Decimal('27.10')]


@pytest.mark.asyncio
async def test_get_latest_empty_series(database):
    async with database.session() as session:
        assert await RateRepository(session).get_latest('EUR', limit=2) == []


@pytest.mark.asyncio
async def test_get_since_is_inclusive_ascending_and_per_currency(database):
    await seed(
        database,
        make_rate('USD', '26.90', datetime(2025, 1, 1, 23, 0)),
        make_rate('USD', '27.30', datetime(2025, 1, 2, 1, 0)),
        make_rate('USD', '27.00', datetime(2025, 1, 2, 0, 0)),
        make_rate('EUR', '30.00', datetime(2025, 1, 2, 0, 30)),
    )

    async with database.session() as session:
        rates = await RateRepository(session).get_since('USD', datetime(2025, 1, 2, 0, 0))

    assert [r.timestamp for r in rates] == [datetime(2025, 1, 2, 0, 0), datetime(2025, 1, 2, 1, 0)]
    assert all(r.currency == 'USD' for r in rates)


@pytest.mark.asyncio
async def test_query_failure_raises_storage_error():
    session = AsyncMock()
    session.execute.side_effect = OperationalError('SELECT', {}, Exception('database is locked'))

    with pytest.raises(StorageError):
        await RateRepository(session).get_latest('USD')
