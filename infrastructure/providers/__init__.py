from .monobank import MonoBankProvider
from .privatbank import PrivatBankProvider

__all__ = ['MonoBankProvider', 'PrivatBankProvider']
