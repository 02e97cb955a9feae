"""Utility modules."""
from .logger import get_logger, reset_user_context, set_user_context
from .exceptions import (
    FinSightError,
    ConfigurationError,
    UnauthorizedError,
    NotFoundOrForbiddenError,
    ValidationError,
    InvalidAmountError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    InsufficientFundsError,
    PDFError,
    StorageError,
    ExternalServiceError,
    RetryableError,
    RetryableExternalServiceError
)
from .retry import retry_with_backoff

__all__ = [
    "get_logger",
    "set_user_context",
    "reset_user_context",
    "FinSightError",
    "ConfigurationError",
    "UnauthorizedError",
    "NotFoundOrForbiddenError",
    "ValidationError",
    "InvalidAmountError",
    "CategoryNotFoundError",
    "DuplicateCategoryError",
    "InsufficientFundsError",
    "PDFError",
    "StorageError",
    "ExternalServiceError",
    "RetryableError",
    "RetryableExternalServiceError",
    "retry_with_backoff"
]
