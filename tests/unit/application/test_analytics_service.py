from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from application.services.analytics_service import AnalyticsService, percent_change
from application.services.rate_reader import CachedRateReader
from domain.exceptions.currency import InsufficientDataError
from domain.models.currency import AveragedRate, RateChange

NOW = datetime(2024, 1, 1, 12, 34, 56, 789)
START_OF_DAY = datetime(2024, 1, 1, 0, 0, 0)


def rate(buy: str, hour: int) -> AveragedRate:
    return AveragedRate(
        currency='USD',
        buy_rate=Decimal(buy),
        sell_rate=Decimal(buy) + Decimal('0.30'),
        timestamp=datetime(2024, 1, 1, hour, 0, 0),
    )


@pytest.fixture
def mock_reader():
    return AsyncMock(spec=CachedRateReader)


@pytest.fixture
def service(mock_reader):
    return AnalyticsService(reader=mock_reader, clock=lambda: NOW)


def test_percent_change_rounding():
    assert percent_change(Decimal('27.0'), Decimal('27.3')) == Decimal('1.11')
    assert percent_change(Decimal('27.0'), Decimal('27.5')) == Decimal('1.85')
    assert percent_change(Decimal('27.3'), Decimal('27.0')) == Decimal('-1.10')
    assert percent_change(Decimal('8'), Decimal('8.0004')) == Decimal('0.01')


def test_percent_change_halves_round_toward_positive_infinity():
    assert percent_change(Decimal('100'), Decimal('100.025')) == Decimal('0.03')
    assert percent_change(Decimal('100'), Decimal('99.975')) == Decimal('-0.02')


class TestHourlyDynamics:

    @pytest.mark.asyncio
    async def test_single_pair_yields_one_entry(self, service, mock_reader):
        mock_reader.since_timestamp.return_value = [rate('27.0', 9), rate('27.3', 10)]

        dynamics = await service.hourly_dynamics('USD')

        assert dynamics == [RateChange(timestamp=datetime(2024, 1, 1, 10, 0), change=Decimal('1.11'))]
        mock_reader.since_timestamp.assert_awaited_once_with('USD', START_OF_DAY)

    @pytest.mark.asyncio
    async def test_entries_follow_series_order(self, service, mock_reader):
        mock_reader.since_timestamp.return_value = [
            rate('27.0', 9),
            rate('27.3', 10),
            rate('27.0', 11),
            rate('27.0', 12),
        ]

        dynamics = await service.hourly_dynamics('USD')

        assert [d.change for d in dynamics] == [Decimal('1.11'), Decimal('-1.10'), Decimal('0.00')]
        assert [d.timestamp.hour for d in dynamics] == [10, 11, 12]

    @pytest.mark.asyncio
    @pytest.mark.parametrize('count', [0, 1])
    async def test_insufficient_data(self, service, mock_reader, count):
        mock_reader.since_timestamp.return_value = [rate('27.0', 9)][:count]

        with pytest.raises(InsufficientDataError) as exc_info:
            await service.hourly_dynamics('USD')

        assert 'Insufficient data for hourly dynamics per day' in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_currency_is_uppercased(self, service, mock_reader):
        mock_reader.since_timestamp.return_value = [rate('27.0', 9), rate('27.3', 10)]

        await service.hourly_dynamics('eur')

        mock_reader.since_timestamp.assert_awaited_once_with('EUR', START_OF_DAY)

    @pytest.mark.asyncio
    async def test_zero_previous_rate_is_not_guarded(self, service, mock_reader):
        mock_reader.since_timestamp.return_value = [rate('0', 9), rate('27.3', 10)]

        with pytest.raises(ZeroDivisionError):
            await service.hourly_dynamics('USD')


class TestLastHourChange:

    @pytest.mark.asyncio
    async def test_change_between_two_newest_records(self, service, mock_reader):
        mock_reader.most_recent_two.return_value = [rate('27.5', 11), rate('27.0', 10)]

        change = await service.last_hour_change('USD')

        assert change == Decimal('1.85')
        mock_reader.most_recent_two.assert_awaited_once_with('USD')

    @pytest.mark.asyncio
    @pytest.mark.parametrize('count', [0, 1])
    async def test_insufficient_data(self, service, mock_reader, count):
        mock_reader.most_recent_two.return_value = [rate('27.5', 11)][:count]

        with pytest.raises(InsufficientDataError) as exc_info:
            await service.last_hour_change('USD')

        assert 'not enough data' in str(exc_info.value)


def test_rate_change_description():
    change = RateChange(timestamp=datetime(2024, 1, 1, 10, 0), change=Decimal('1.20'))

    assert change.describe() == 'Time: 2024-01-01T10:00:00, change: 1.20%'
