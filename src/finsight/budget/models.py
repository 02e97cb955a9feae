"""Data models for budget categories."""
from dataclasses import dataclass
from typing import List, Optional

# Colour tags a new category can be assigned
AVAILABLE_COLORS = [
    "bg-finsight-purple",
    "bg-finsight-blue",
    "bg-finsight-orange",
    "bg-finsight-red",
    "bg-finsight-green",
]


@dataclass
class BudgetCategory:
    """A named bucket with an allocated and a spent amount."""
    id: str
    name: str
    allocated: float
    spent: float
    color: str
    user_id: str = ""


@dataclass
class OperationResult:
    """Outcome of a fund operation, suitable for showing to the user."""
    success: bool
    message: str
    category: Optional[BudgetCategory] = None
    from_category: Optional[BudgetCategory] = None
    to_category: Optional[BudgetCategory] = None


def category_id_from_name(name: str) -> str:
    """Lowercase the name and hyphenate whitespace runs."""
    return "-".join(name.strip().lower().split())


def format_amount(amount: float) -> str:
    """Render an amount without a trailing .0 for whole values."""
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    return str(value)


def default_categories(user_id: str) -> List[BudgetCategory]:
    """Starter categories for a new user."""
    return [
        BudgetCategory("housing", "Housing", 2000, 1800, "bg-finsight-purple", user_id),
        BudgetCategory("food", "Food", 800, 650, "bg-finsight-blue", user_id),
        BudgetCategory("transportation", "Transportation", 500, 320, "bg-finsight-orange", user_id),
        BudgetCategory("entertainment", "Entertainment", 400, 410, "bg-finsight-red", user_id),
        BudgetCategory("utilities", "Utilities", 350, 310, "bg-finsight-green", user_id),
        BudgetCategory("savings", "Savings", 1000, 800, "bg-finsight-blue", user_id),
        BudgetCategory("bills", "Bills", 500, 450, "bg-finsight-purple", user_id),
        BudgetCategory("spending", "Weekly Spending", 300, 200, "bg-finsight-green", user_id),
    ]
