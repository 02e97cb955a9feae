"""Data models for chat turns and actions."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from finsight.receipts.models import ReceiptInfo

SUCCESS = "success"
ERROR = "error"


@dataclass
class ChatAction:
    """Structured result of an executed intent."""
    type: str
    status: str
    details: Any = None


@dataclass
class FinancialInsight:
    """One insight card shown by the analysis intent."""
    type: str
    title: str
    description: str
    impact: Optional[str] = None
    value: Optional[float] = None
    category: Optional[str] = None


@dataclass
class ActionResult:
    """What the interpreter returns for a recognised intent."""
    action: ChatAction
    response: str
    receipts: List[ReceiptInfo] = field(default_factory=list)
    insights: List[FinancialInsight] = field(default_factory=list)


@dataclass
class Message:
    """Chat turn."""
    content: str
    sender: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    action: Optional[ChatAction] = None
    receipts: List[ReceiptInfo] = field(default_factory=list)
    insights: List[FinancialInsight] = field(default_factory=list)
