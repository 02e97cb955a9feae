"""Data models for receipts."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass
class Receipt:
    """Receipt file metadata bound to a transaction."""
    id: str
    transaction_id: str
    user_id: str
    file_path: str
    file_name: str
    file_type: str
    file_size: int
    uploaded_at: datetime


@dataclass
class ReceiptInfo:
    """Receipt as shown to the user, with a signed download URL."""
    id: str
    transaction_id: str
    file_path: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    full_url: Optional[str] = None


@dataclass
class ReceiptQuery:
    """Filters for receipt lookups."""
    transaction_ids: Optional[List[str]] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    limit: Optional[int] = None
