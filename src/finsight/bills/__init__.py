"""Recurring bills."""
from .models import Bill, BILL_FREQUENCIES, BILL_STATUSES, monthly_amount, monthly_total
from .repository import BillRepository

__all__ = [
    "Bill",
    "BILL_FREQUENCIES",
    "BILL_STATUSES",
    "BillRepository",
    "monthly_amount",
    "monthly_total",
]
