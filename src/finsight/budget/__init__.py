"""Budget categories and fund operations."""
from .models import BudgetCategory, OperationResult, AVAILABLE_COLORS, default_categories
from .repository import BudgetRepository, InMemoryBudgetRepository, SqliteBudgetRepository
from .service import FundService

__all__ = [
    "BudgetCategory",
    "OperationResult",
    "AVAILABLE_COLORS",
    "default_categories",
    "BudgetRepository",
    "InMemoryBudgetRepository",
    "SqliteBudgetRepository",
    "FundService",
]
