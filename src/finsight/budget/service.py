"""Fund allocation operations over a budget repository."""
import random
from typing import Callable, List, Optional

from .models import (
    AVAILABLE_COLORS,
    BudgetCategory,
    OperationResult,
    category_id_from_name,
    default_categories,
    format_amount,
)
from .repository import BudgetRepository
from finsight.utils.exceptions import (
    CategoryNotFoundError,
    DuplicateCategoryError,
    FinSightError,
    InsufficientFundsError,
    InvalidAmountError,
    ValidationError,
)
from finsight.utils.logger import get_logger

logger = get_logger()


class FundService:
    """Allocate, transfer, create and update budget categories.

    Domain errors are raised internally and turned into failed
    OperationResults here, so callers only ever see results.
    """

    def __init__(self, repository: BudgetRepository, choose_color: Optional[Callable[[List[str]], str]] = None):
        self.repository = repository
        self.choose_color = choose_color or random.choice

    def get_categories(self, user_id: str) -> List[BudgetCategory]:
        return self.repository.list_categories(user_id)

    def seed_defaults(self, user_id: str) -> int:
        """Create the starter categories a user does not have yet."""
        created = 0
        for category in default_categories(user_id):
            if self.repository.get_category(user_id, category.id) is None:
                self.repository.add_category(category)
                created += 1
        logger.info(f"Seeded {created} default categories for {user_id}")
        return created

    def allocate(self, user_id: str, category_id: str, amount: float) -> OperationResult:
        """Add amount to a category's allocation."""
        try:
            category = self.repository.get_category(user_id, category_id)
            if category is None:
                names = ", ".join(c.name for c in self.repository.list_categories(user_id))
                raise CategoryNotFoundError(
                    f"Category '{category_id}' not found. Available categories are: {names}"
                )
            if amount <= 0:
                raise InvalidAmountError("Amount must be greater than zero")

            updated = self.repository.increment_allocated(user_id, category.id, amount)
        except FinSightError as e:
            return self._failure("allocate", e)

        logger.info(f"Allocated {amount} to {updated.id}")
        return OperationResult(
            success=True,
            message=f"Successfully allocated ${format_amount(amount)} to {updated.name}",
            category=updated
        )

    def transfer(self, user_id: str, from_id: str, to_id: str, amount: float) -> OperationResult:
        """Move allocation from one category to another."""
        try:
            source = self.repository.get_category(user_id, from_id)
            if source is None:
                raise CategoryNotFoundError(f"Source category '{from_id}' not found")
            destination = self.repository.get_category(user_id, to_id)
            if destination is None:
                raise CategoryNotFoundError(f"Destination category '{to_id}' not found")
            if amount <= 0:
                raise InvalidAmountError("Amount must be greater than zero")
            if source.allocated < amount:
                raise InsufficientFundsError(
                    f"Not enough funds in {source.name}. "
                    f"Available: ${format_amount(source.allocated)}"
                )

            from_category, to_category = self.repository.transfer(
                user_id, source.id, destination.id, amount
            )
        except FinSightError as e:
            return self._failure("transfer", e)

        logger.info(f"Transferred {amount} from {from_category.id} to {to_category.id}")
        return OperationResult(
            success=True,
            message=(
                f"Successfully transferred ${format_amount(amount)} "
                f"from {from_category.name} to {to_category.name}"
            ),
            from_category=from_category,
            to_category=to_category
        )

    def create_category(self, user_id: str, name: str, initial_allocation: float = 0) -> OperationResult:
        """Create a category whose id is derived from its name."""
        try:
            if not name or not name.strip():
                raise ValidationError("Category name cannot be empty")
            if initial_allocation < 0:
                raise InvalidAmountError("Amount cannot be negative")

            name = name.strip()
            category_id = category_id_from_name(name)
            for existing in self.repository.list_categories(user_id):
                if existing.id.lower() == category_id or existing.name.lower() == name.lower():
                    raise DuplicateCategoryError(f"Category '{name}' already exists")

            category = self.repository.add_category(BudgetCategory(
                id=category_id,
                name=name,
                allocated=initial_allocation,
                spent=0,
                color=self.choose_color(AVAILABLE_COLORS),
                user_id=user_id
            ))
        except FinSightError as e:
            return self._failure("create_category", e)

        suffix = ""
        if initial_allocation > 0:
            suffix = f" with initial allocation of ${format_amount(initial_allocation)}"
        logger.info(f"Created category {category.id}")
        return OperationResult(
            success=True,
            message=f"Successfully created new category '{name}'{suffix}",
            category=category
        )

    def update_category_amount(self, user_id: str, category_id: str, new_amount: float) -> OperationResult:
        """Overwrite a category's allocation."""
        try:
            category = self.repository.get_category(user_id, category_id)
            if category is None:
                raise CategoryNotFoundError(f"Category '{category_id}' not found")
            if new_amount < 0:
                raise InvalidAmountError("Amount cannot be negative")

            previous = category.allocated
            updated = self.repository.set_allocated(user_id, category.id, new_amount)
        except FinSightError as e:
            return self._failure("update_category_amount", e)

        logger.info(f"Updated {updated.id} allocation from {previous} to {new_amount}")
        return OperationResult(
            success=True,
            message=(
                f"Successfully updated {updated.name} budget "
                f"from ${format_amount(previous)} to ${format_amount(new_amount)}"
            ),
            category=updated
        )

    @staticmethod
    def _failure(operation: str, error: FinSightError) -> OperationResult:
        logger.warning(f"{operation} rejected: {error}")
        return OperationResult(success=False, message=str(error))
