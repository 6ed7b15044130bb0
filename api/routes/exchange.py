import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_analytics_service, get_rate_service, get_scheduler
from api.schemas import AverageRateResponse, LastHourChangeResponse, RateChangeResponse, RefreshResponse
from application.services import AnalyticsService, RateService, RateUpdateScheduler, SchedulerState

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/exchange', tags=['exchange'])

CurrencyParam = Annotated[
	str,
	Query(
		pattern='^(USD|EUR)$',
		description="Currency must be 'USD' or 'EUR'",
	),
]


@router.get(
	'/dynamics/day',
	response_model=list[RateChangeResponse],
	status_code=status.HTTP_200_OK,
	summary='Hourly changes of the buy rate since the start of the day',
)
async def get_hourly_dynamics(
	currency: CurrencyParam,
	service: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> list[RateChangeResponse]:
	logger.info(f'Handling GET request for hourly dynamics of currency={currency}')
	dynamics = await service.hourly_dynamics(currency)
	return [
		RateChangeResponse(timestamp=item.timestamp, change=item.change, description=item.describe())
		for item in dynamics
	]


@router.get(
	'/dynamics/hour',
	response_model=LastHourChangeResponse,
	status_code=status.HTTP_200_OK,
	summary='Change of the buy rate over the last hour',
)
async def get_last_hour_change(
	currency: CurrencyParam,
	service: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> LastHourChangeResponse:
	logger.info(f'Handling GET request for last hour change of currency={currency}')
	change = await service.last_hour_change(currency)
	return LastHourChangeResponse(
		currency=currency,
		change=change,
		message=f'Dynamic for last hour for {currency}: {change}%',
	)


@router.get(
	'/last',
	response_model=AverageRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Latest averaged rate',
)
async def get_last_rate(
	currency: CurrencyParam,
	service: Annotated[RateService, Depends(get_rate_service)],
) -> AverageRateResponse:
	logger.info(f'Handling GET request for the latest rate of currency={currency}')
	rate = await service.get_latest(currency)
	return AverageRateResponse(
		id=rate.id,
		currency=rate.currency,
		buy_rate=rate.buy_rate,
		sell_rate=rate.sell_rate,
		timestamp=rate.timestamp,
	)


@router.post(
	'/refresh',
	response_model=RefreshResponse,
	status_code=status.HTTP_202_ACCEPTED,
	summary='Start a rate update now',
)
async def refresh_rates(
	scheduler: Annotated[RateUpdateScheduler, Depends(get_scheduler)],
) -> RefreshResponse:
	state = scheduler.state
	started = state is SchedulerState.IDLE
	if started:
		scheduler.spawn_trigger()
	else:
		logger.warning('Refresh requested while an update is running, skipping')
	return RefreshResponse(started=started, state=state.value)
