"""Budget category repositories."""
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .models import BudgetCategory, format_amount
from finsight.storage.database import Database
from finsight.utils.exceptions import (
    CategoryNotFoundError,
    DuplicateCategoryError,
    InsufficientFundsError,
)
from finsight.utils.logger import get_logger

logger = get_logger()


class BudgetRepository(ABC):
    """Persistence interface for budget categories.

    Category ids are matched case-insensitively. Returned categories are
    snapshots; mutate them only through the repository.
    """

    @abstractmethod
    def list_categories(self, user_id: str) -> List[BudgetCategory]:
        ...

    @abstractmethod
    def get_category(self, user_id: str, category_id: str) -> Optional[BudgetCategory]:
        ...

    @abstractmethod
    def add_category(self, category: BudgetCategory) -> BudgetCategory:
        ...

    @abstractmethod
    def set_allocated(self, user_id: str, category_id: str, amount: float) -> BudgetCategory:
        ...

    @abstractmethod
    def increment_allocated(self, user_id: str, category_id: str, amount: float) -> BudgetCategory:
        """Add amount to the current allocation in a single write."""
        ...

    @abstractmethod
    def transfer(
        self, user_id: str, from_id: str, to_id: str, amount: float
    ) -> Tuple[BudgetCategory, BudgetCategory]:
        """Move amount of allocation between two categories as one unit."""
        ...


class InMemoryBudgetRepository(BudgetRepository):
    """Dictionary-backed repository."""

    def __init__(self, categories: Optional[List[BudgetCategory]] = None):
        self._lock = threading.Lock()
        self._categories: Dict[Tuple[str, str], BudgetCategory] = {}
        for category in categories or []:
            self._categories[(category.user_id, category.id.lower())] = replace(category)

    def list_categories(self, user_id: str) -> List[BudgetCategory]:
        with self._lock:
            return [replace(c) for (uid, _), c in self._categories.items() if uid == user_id]

    def get_category(self, user_id: str, category_id: str) -> Optional[BudgetCategory]:
        with self._lock:
            category = self._categories.get((user_id, category_id.lower()))
            return replace(category) if category else None

    def add_category(self, category: BudgetCategory) -> BudgetCategory:
        key = (category.user_id, category.id.lower())
        with self._lock:
            if key in self._categories:
                raise DuplicateCategoryError(f"Category '{category.name}' already exists")
            self._categories[key] = replace(category)
        return replace(category)

    def set_allocated(self, user_id: str, category_id: str, amount: float) -> BudgetCategory:
        with self._lock:
            category = self._require(user_id, category_id)
            category.allocated = amount
            return replace(category)

    def increment_allocated(self, user_id: str, category_id: str, amount: float) -> BudgetCategory:
        with self._lock:
            category = self._require(user_id, category_id)
            category.allocated += amount
            return replace(category)

    def transfer(
        self, user_id: str, from_id: str, to_id: str, amount: float
    ) -> Tuple[BudgetCategory, BudgetCategory]:
        with self._lock:
            source = self._require(user_id, from_id)
            destination = self._require(user_id, to_id)
            if source.allocated < amount:
                raise InsufficientFundsError(
                    f"Not enough funds in {source.name}. Available: ${format_amount(source.allocated)}"
                )
            source.allocated -= amount
            destination.allocated += amount
            return replace(source), replace(destination)

    def _require(self, user_id: str, category_id: str) -> BudgetCategory:
        category = self._categories.get((user_id, category_id.lower()))
        if category is None:
            raise CategoryNotFoundError(f"Category '{category_id}' not found")
        return category


class SqliteBudgetRepository(BudgetRepository):
    """Repository over the budget_categories table."""

    COLUMNS = "id, name, allocated, spent, color, user_id"

    def __init__(self, database: Database):
        self.database = database

    def list_categories(self, user_id: str) -> List[BudgetCategory]:
        with self.database.connect() as conn:
            rows = conn.execute(
                f"SELECT {self.COLUMNS} FROM budget_categories WHERE user_id = ? ORDER BY rowid",
                (user_id,)
            ).fetchall()
        return [self._to_category(row) for row in rows]

    def get_category(self, user_id: str, category_id: str) -> Optional[BudgetCategory]:
        with self.database.connect() as conn:
            row = self._fetch(conn, user_id, category_id)
        return self._to_category(row) if row else None

    def add_category(self, category: BudgetCategory) -> BudgetCategory:
        with self.database.connect() as conn:
            if self._fetch(conn, category.user_id, category.id):
                raise DuplicateCategoryError(f"Category '{category.name}' already exists")
            conn.execute(
                "INSERT INTO budget_categories (id, name, allocated, spent, color, user_id) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (category.id, category.name, category.allocated, category.spent,
                 category.color, category.user_id)
            )
        return replace(category)

    def set_allocated(self, user_id: str, category_id: str, amount: float) -> BudgetCategory:
        with self.database.connect() as conn:
            row = self._fetch(conn, user_id, category_id)
            if row is None:
                raise CategoryNotFoundError(f"Category '{category_id}' not found")
            conn.execute(
                "UPDATE budget_categories SET allocated = ? WHERE user_id = ? AND id = ?",
                (amount, user_id, row["id"])
            )
            row = self._fetch(conn, user_id, row["id"])
        return self._to_category(row)

    def increment_allocated(self, user_id: str, category_id: str, amount: float) -> BudgetCategory:
        with self.database.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = self._fetch(conn, user_id, category_id)
            if row is None:
                raise CategoryNotFoundError(f"Category '{category_id}' not found")
            conn.execute(
                "UPDATE budget_categories SET allocated = allocated + ? WHERE user_id = ? AND id = ?",
                (amount, user_id, row["id"])
            )
            row = self._fetch(conn, user_id, row["id"])
        return self._to_category(row)

    def transfer(
        self, user_id: str, from_id: str, to_id: str, amount: float
    ) -> Tuple[BudgetCategory, BudgetCategory]:
        # Both writes share one transaction; the debit is conditional on funds.
        with self.database.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            source = self._fetch(conn, user_id, from_id)
            if source is None:
                raise CategoryNotFoundError(f"Source category '{from_id}' not found")
            destination = self._fetch(conn, user_id, to_id)
            if destination is None:
                raise CategoryNotFoundError(f"Destination category '{to_id}' not found")

            debit = conn.execute(
                "UPDATE budget_categories SET allocated = allocated - ? "
                "WHERE user_id = ? AND id = ? AND allocated >= ?",
                (amount, user_id, source["id"], amount)
            )
            if debit.rowcount != 1:
                raise InsufficientFundsError(
                    f"Not enough funds in {source['name']}. Available: ${format_amount(source['allocated'])}"
                )
            conn.execute(
                "UPDATE budget_categories SET allocated = allocated + ? WHERE user_id = ? AND id = ?",
                (amount, user_id, destination["id"])
            )
            source = self._fetch(conn, user_id, source["id"])
            destination = self._fetch(conn, user_id, destination["id"])

        logger.debug(f"Transferred {amount} from {source['id']} to {destination['id']}")
        return self._to_category(source), self._to_category(destination)

    def _fetch(self, conn, user_id: str, category_id: str):
        return conn.execute(
            f"SELECT {self.COLUMNS} FROM budget_categories WHERE user_id = ? AND lower(id) = lower(?)",
            (user_id, category_id)
        ).fetchone()

    @staticmethod
    def _to_category(row) -> BudgetCategory:
        return BudgetCategory(
            id=row["id"],
            name=row["name"],
            allocated=row["allocated"],
            spent=row["spent"],
            color=row["color"],
            user_id=row["user_id"]
        )
