import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.dependencies import cleanup_dependencies, deps, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import exchange
from config.logging_config import setup_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
	setup_logging(settings.LOG_LEVEL, settings.LOG_DIRECTORY if settings.LOG_TO_FILE else None)
	logger.info('Starting Exchange Rate Averaging API...')

	init_dependencies(settings)

	if deps.db is None or deps.scheduler is None:
		raise RuntimeError('Dependencies not initialized')
	await deps.db.create_tables()
	logger.info('Database tables created')

	if settings.SCHEDULER_ENABLED:
		deps.scheduler.start()

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
	logger.error(f'Unhandled exception: {exc}', exc_info=True)
	return JSONResponse(
		status_code=500, content={'error': 'Internal server error', 'message': str(exc)}
	)


app.include_router(exchange.router)
register_exception_handlers(app)
