from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./exchange_rates.db'

	REDIS_URL: str = 'redis://localhost:6379'
	CACHE_BACKEND: str = 'redis'  # 'redis' or 'memory'

	# Providers
	PRIVATBANK_URL: str = 'https://api.privatbank.ua/p24api/pubinfo?exchange&coursid=5'
	MONOBANK_URL: str = 'https://api.monobank.ua/bank/currency'
	PROVIDER_TIMEOUT: int = 10
	MONOBANK_MAX_RETRIES: int = 3
	MONOBANK_RETRY_DELAY_SECONDS: float = 5.0

	# Scheduler
	FETCH_INTERVAL_SECONDS: float = 3600.0
	SCHEDULER_ENABLED: bool = True

	# Application
	APP_NAME: str = 'Exchange Rate Averaging API'

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_DIRECTORY: str = 'logs'
	LOG_TO_FILE: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
