"""Data models for recurring bills."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

BILL_FREQUENCIES = ("monthly", "quarterly", "annually", "weekly", "biweekly")
BILL_STATUSES = ("paid", "unpaid", "upcoming", "overdue")

# Multiplier that turns one payment into its average monthly cost
MONTHLY_FACTORS = {
    "monthly": 1.0,
    "quarterly": 1 / 3,
    "annually": 1 / 12,
    "weekly": 4.345,
    "biweekly": 2.175,
}


@dataclass
class Bill:
    """Recurring bill with its next due date."""
    id: str
    user_id: str
    name: str
    amount: float
    due_date: int
    category: str
    frequency: str
    next_due_date: date
    status: str = "upcoming"
    auto_pay: bool = False
    payment_method_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def monthly_amount(bill: Bill) -> float:
    return bill.amount * MONTHLY_FACTORS.get(bill.frequency, 1.0)


def monthly_total(bills: Iterable[Bill]) -> float:
    """Sum of bills normalised to a monthly amount."""
    return round(sum(monthly_amount(bill) for bill in bills), 2)
