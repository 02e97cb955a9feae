"""Accounts and transactions."""
from .models import Account, Transaction
from .repository import LedgerRepository

__all__ = ["Account", "Transaction", "LedgerRepository"]
