"""Receipts bound to transactions."""
from .models import Receipt, ReceiptInfo, ReceiptQuery
from .service import ReceiptService

__all__ = ["Receipt", "ReceiptInfo", "ReceiptQuery", "ReceiptService"]
