from .responses import AverageRateResponse, LastHourChangeResponse, RateChangeResponse, RefreshResponse

__all__ = [
	'AverageRateResponse',
	'LastHourChangeResponse',
	'RateChangeResponse',
	'RefreshResponse',
]
