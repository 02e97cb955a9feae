"""Data models for accounts and transactions."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

ACCOUNT_TYPES = ("checking", "savings", "credit", "investment", "loan")
TRANSACTION_TYPES = ("debit", "credit")


@dataclass
class Account:
    """Linked financial account."""
    id: str
    user_id: str
    institution: str
    name: str
    type: str
    masked_number: Optional[str] = None
    current_balance: float = 0.0
    available_balance: Optional[float] = None
    currency: str = "USD"
    is_active: bool = True


@dataclass
class Transaction:
    """Transaction data."""
    id: str
    user_id: str
    amount: float
    description: str
    type: str
    date: date
    account_id: Optional[str] = None
    currency: str = "USD"
    merchant: Optional[str] = None
    category: Optional[str] = None
    pending: bool = False
