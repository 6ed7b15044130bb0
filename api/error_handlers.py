import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	CacheError,
	InsufficientDataError,
	ProviderError,
	RateNotFoundError,
	StorageError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={'error': error, 'message': str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InsufficientDataError)
	async def insufficient_data_handler(request: Request, exc: InsufficientDataError):
		logger.info(f'Insufficient data: {exc}')
		return _error(400, 'Insufficient data', exc)

	@app.exception_handler(RateNotFoundError)
	async def not_found_handler(request: Request, exc: RateNotFoundError):
		logger.info(f'Entity not found: {exc}')
		return _error(404, 'Entity not found', exc)

	@app.exception_handler(ProviderError)
	async def provider_error_handler(request: Request, exc: ProviderError):
		logger.error(f'Provider error: {exc}')
		return JSONResponse(
			status_code=503,
			content={'error': 'External API error', 'message': 'Exchange rate provider unavailable'},
		)

	@app.exception_handler(StorageError)
	async def storage_error_handler(request: Request, exc: StorageError):
		logger.error(f'Storage error: {exc}', exc_info=exc)
		return _error(500, 'Database error', exc)

	@app.exception_handler(CacheError)
	async def cache_error_handler(request: Request, exc: CacheError):
		logger.error(f'Cache error: {exc}', exc_info=exc)
		return _error(500, 'Cache error', exc)
