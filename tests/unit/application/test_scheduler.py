import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from application.services.rate_service import RateService
from application.services.scheduler import RateUpdateScheduler, SchedulerState


@pytest.fixture
def mock_rate_service():
    service = AsyncMock(spec=RateService)
    service.update_average_rates.return_value = []
    return service


@pytest.fixture
def scheduler(mock_rate_service):
    return RateUpdateScheduler(rate_service=mock_rate_service, interval_seconds=3600)


class TestTrigger:

    @pytest.mark.asyncio
    async def test_idle_trigger_runs_update(self, scheduler, mock_rate_service):
        assert scheduler.state is SchedulerState.IDLE

        ran = await scheduler.trigger()

        assert ran is True
        mock_rate_service.update_average_rates.assert_awaited_once()
        assert scheduler.state is SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_trigger_while_running_is_dropped(self, scheduler, mock_rate_service):
        release = asyncio.Event()

        async def blocked_update():
            await release.wait()
            return []

        mock_rate_service.update_average_rates.side_effect = blocked_update

        first = asyncio.create_task(scheduler.trigger())
        await asyncio.sleep(0)
        assert scheduler.state is SchedulerState.RUNNING

        second = await scheduler.trigger()

        assert second is False
        assert mock_rate_service.update_average_rates.await_count == 1
        assert scheduler.state is SchedulerState.RUNNING

        release.set()
        assert await first is True
        assert scheduler.state is SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_failed_run_restores_idle_and_next_trigger_runs(self, scheduler, mock_rate_service, caplog):
        mock_rate_service.update_average_rates.side_effect = [RuntimeError('PrivatBank down'), []]

        with caplog.at_level(logging.ERROR):
            assert await scheduler.trigger() is True

        assert scheduler.state is SchedulerState.IDLE
        assert 'PrivatBank down' in caplog.text

        assert await scheduler.trigger() is True
        assert mock_rate_service.update_average_rates.await_count == 2


class TestTicker:

    def test_interval_must_be_positive(self, mock_rate_service):
        with pytest.raises(ValueError):
            RateUpdateScheduler(rate_service=mock_rate_service, interval_seconds=0)

    @pytest.mark.asyncio
    async def test_start_fires_immediately_and_then_every_interval(self, mock_rate_service):
        scheduler = RateUpdateScheduler(rate_service=mock_rate_service, interval_seconds=0.02)

        scheduler.start()
        assert scheduler.is_started
        await asyncio.sleep(0.07)
        await scheduler.stop()

        assert mock_rate_service.update_average_rates.await_count >= 2
        assert not scheduler.is_started

    @pytest.mark.asyncio
    async def test_ticks_during_a_long_run_are_skipped(self, mock_rate_service):
        release = asyncio.Event()

        async def blocked_update():
            await release.wait()
            return []

        mock_rate_service.update_average_rates.side_effect = blocked_update
        scheduler = RateUpdateScheduler(rate_service=mock_rate_service, interval_seconds=0.01)

        scheduler.start()
        await asyncio.sleep(0.05)

        assert mock_rate_service.update_average_rates.await_count == 1
        assert scheduler.state is SchedulerState.RUNNING

        release.set()
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_in_flight_run(self, mock_rate_service):
        never = asyncio.Event()

        async def blocked_update():
            await never.wait()

        mock_rate_service.update_average_rates.side_effect = blocked_update
        scheduler = RateUpdateScheduler(rate_service=mock_rate_service, interval_seconds=3600)

        scheduler.start()
        await asyncio.sleep(0.01)
        assert scheduler.state is SchedulerState.RUNNING

        await scheduler.stop()

        assert scheduler.state is SchedulerState.IDLE
        assert not scheduler.is_started
