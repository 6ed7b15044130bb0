class CurrencyException(Exception):
	pass


class ProviderError(CurrencyException):
	pass


class RateLimitError(ProviderError):
	pass


class InsufficientDataError(CurrencyException):
	pass


class RateNotFoundError(CurrencyException):
	pass


class StorageError(CurrencyException):
	pass


class CacheError(CurrencyException):
	pass
