"""
Account API: balance.
"""
from .client import GET_BALANCE, AccountClient, Balance

__all__ = ["GET_BALANCE", "AccountClient", "Balance"]
