"""Request bodies for the HTTP API."""
import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProcessDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: Optional[str] = Field(default=None, alias="documentId")
    file_path: Optional[str] = Field(default=None, alias="filePath")


class AskDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = None
    document_id: Optional[str] = Field(default=None, alias="documentId")


class ChatRequest(BaseModel):
    message: Optional[str] = None


class AccountCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    institution: str
    name: str
    type: str
    masked_number: Optional[str] = Field(default=None, alias="maskedNumber")
    current_balance: float = Field(default=0.0, alias="currentBalance")
    available_balance: Optional[float] = Field(default=None, alias="availableBalance")
    currency: str = "USD"


class TransactionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: float
    description: str
    type: str = "debit"
    date: Optional[datetime.date] = None
    account_id: Optional[str] = Field(default=None, alias="accountId")
    merchant: Optional[str] = None
    category: Optional[str] = None
    currency: str = "USD"
    pending: bool = False


class BillCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    amount: float
    due_date: int = Field(alias="dueDate")
    category: str
    frequency: str = "monthly"
    status: str = "upcoming"
    auto_pay: bool = Field(default=False, alias="autoPay")
    payment_method_id: Optional[str] = Field(default=None, alias="paymentMethodId")
    next_due_date: datetime.date = Field(alias="nextDueDate")
    notes: Optional[str] = None


class BillUpdateRequest(BaseModel):
    """Partial bill update; only the fields sent are changed."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    amount: Optional[float] = None
    due_date: Optional[int] = Field(default=None, alias="dueDate")
    category: Optional[str] = None
    frequency: Optional[str] = None
    status: Optional[str] = None
    auto_pay: Optional[bool] = Field(default=None, alias="autoPay")
    payment_method_id: Optional[str] = Field(default=None, alias="paymentMethodId")
    next_due_date: Optional[datetime.date] = Field(default=None, alias="nextDueDate")
    notes: Optional[str] = None
