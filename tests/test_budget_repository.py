"""Tests for the SQLite budget repository."""
import unittest
import tempfile
import shutil
import threading
from pathlib import Path

from finsight.budget import BudgetCategory, FundService, SqliteBudgetRepository, default_categories
from finsight.storage import Database
from finsight.utils.exceptions import CategoryNotFoundError, DuplicateCategoryError, InsufficientFundsError

USER = "user-1"


class TestSqliteBudgetRepository(unittest.TestCase):
    """Test SqliteBudgetRepository functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.repository = SqliteBudgetRepository(Database(self.test_dir / "test.db"))
        for category in default_categories(USER):
            self.repository.add_category(category)

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_list_preserves_insertion_order(self):
        """Test categories come back in creation order."""
        names = [c.name for c in self.repository.list_categories(USER)]

        self.assertEqual(names[0], "Housing")
        self.assertEqual(names[-1], "Weekly Spending")
        self.assertEqual(len(names), 8)

    def test_get_category_case_insensitive(self):
        """Test lookups ignore case."""
        category = self.repository.get_category(USER, "FoOd")

        self.assertEqual(category.id, "food")
        self.assertEqual(category.allocated, 800)
        self.assertIsNone(self.repository.get_category("user-2", "food"))

    def test_add_duplicate(self):
        """Test adding an existing id raises."""
        with self.assertRaises(DuplicateCategoryError):
            self.repository.add_category(BudgetCategory("Food", "Food", 1, 0, "bg-finsight-red", USER))

    def test_set_allocated(self):
        """Test overwriting the allocation."""
        updated = self.repository.set_allocated(USER, "bills", 640)

        self.assertEqual(updated.allocated, 640)
        self.assertEqual(self.repository.get_category(USER, "bills").allocated, 640)

        with self.assertRaises(CategoryNotFoundError):
            self.repository.set_allocated(USER, "missing", 1)

    def test_transfer(self):
        """Test a transfer moves the amount between categories."""
        source, destination = self.repository.transfer(USER, "savings", "food", 300)

        self.assertEqual(source.allocated, 700)
        self.assertEqual(destination.allocated, 1100)

    def test_transfer_insufficient_funds_rolls_back(self):
        """Test a failed debit leaves both rows untouched."""
        with self.assertRaises(InsufficientFundsError) as context:
            self.repository.transfer(USER, "food", "housing", 800.01)

        self.assertIn("Not enough funds in Food. Available: $800", str(context.exception))
        self.assertEqual(self.repository.get_category(USER, "food").allocated, 800)
        self.assertEqual(self.repository.get_category(USER, "housing").allocated, 2000)

    def test_transfer_missing_destination_rolls_back(self):
        """Test nothing is debited when the destination is unknown."""
        with self.assertRaises(CategoryNotFoundError):
            self.repository.transfer(USER, "food", "travel", 10)

        self.assertEqual(self.repository.get_category(USER, "food").allocated, 800)

    def test_concurrent_transfers_never_overdraw(self):
        """Test parallel transfers cannot take more than the source holds."""
        service = FundService(self.repository)
        results = []

        def worker():
            results.append(service.transfer(USER, "utilities", "savings", 100))

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        succeeded = [r for r in results if r.success]
        self.assertEqual(len(succeeded), 3)
        self.assertEqual(self.repository.get_category(USER, "utilities").allocated, 50)
        self.assertEqual(self.repository.get_category(USER, "savings").allocated, 1300)

    def test_increment_allocated(self):
        """Test increments add to the stored allocation."""
        updated = self.repository.increment_allocated(USER, "Utilities", 25)

        self.assertEqual(updated.allocated, 375)
        with self.assertRaises(CategoryNotFoundError):
            self.repository.increment_allocated(USER, "travel", 25)

    def test_concurrent_allocations_keep_every_increment(self):
        """Test parallel allocations to one category all land."""
        service = FundService(self.repository)
        results = []

        def worker():
            results.append(service.allocate(USER, "utilities", 25))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertTrue(all(r.success for r in results))
        self.assertEqual(self.repository.get_category(USER, "utilities").allocated, 550)


if __name__ == "__main__":
    unittest.main()
