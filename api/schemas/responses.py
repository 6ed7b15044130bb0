from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AverageRateResponse(BaseModel):
	id: int | None = Field(None, description='Record identifier')
	currency: str = Field(..., description='Currency code')
	buy_rate: Decimal = Field(..., description='Average buy rate in UAH')
	sell_rate: Decimal = Field(..., description='Average sell rate in UAH')
	timestamp: datetime = Field(..., description='When the average was stored')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'id': 1,
				'currency': 'USD',
				'buy_rate': 27.5,
				'sell_rate': 27.8,
				'timestamp': '2024-01-01T10:00:00',
			}
		}
	)


class RateChangeResponse(BaseModel):
	timestamp: datetime = Field(..., description='Timestamp of the later record')
	change: Decimal = Field(..., description='Change of the buy rate in percent')
	description: str = Field(..., description='Human readable form of the change')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'timestamp': '2024-01-01T10:00:00',
				'change': 1.2,
				'description': 'Time: 2024-01-01T10:00:00, change: 1.20%',
			}
		}
	)


class LastHourChangeResponse(BaseModel):
	currency: str = Field(..., description='Currency code')
	change: Decimal = Field(..., description='Change of the buy rate in percent')
	message: str = Field(..., description='Human readable form of the change')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'currency': 'EUR',
				'change': 0.35,
				'message': 'Dynamic for last hour for EUR: 0.35%',
			}
		}
	)


class RefreshResponse(BaseModel):
	started: bool = Field(..., description='False when an update was already running')
	state: str = Field(..., description='Scheduler state when the request arrived')
