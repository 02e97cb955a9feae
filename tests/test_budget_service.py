"""Tests for fund operations."""
import unittest

from finsight.budget import FundService, InMemoryBudgetRepository, default_categories, AVAILABLE_COLORS

USER = "user-1"


class TestFundService(unittest.TestCase):
    """Test FundService against the in-memory repository."""

    def setUp(self):
        """Set up test fixtures."""
        self.repository = InMemoryBudgetRepository(default_categories(USER))
        self.service = FundService(self.repository, choose_color=lambda colors: colors[0])

    def allocated(self, category_id):
        return self.repository.get_category(USER, category_id).allocated

    def test_allocate(self):
        """Test allocating to an existing category."""
        result = self.service.allocate(USER, "housing", 500)

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Successfully allocated $500 to Housing")
        self.assertEqual(self.allocated("housing"), 2500)
        self.assertEqual(result.category.allocated, 2500)

    def test_allocate_is_case_insensitive(self):
        """Test category ids match regardless of case."""
        result = self.service.allocate(USER, "HOUSING", 12.5)

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Successfully allocated $12.5 to Housing")

    def test_allocate_unknown_category(self):
        """Test allocating to an unknown category changes nothing."""
        before = self.service.get_categories(USER)

        result = self.service.allocate(USER, "vacation", 100)

        self.assertFalse(result.success)
        self.assertIn("Category 'vacation' not found", result.message)
        self.assertIn("Available categories are: Housing, Food", result.message)
        self.assertEqual(self.service.get_categories(USER), before)

    def test_allocate_non_positive_amount(self):
        """Test zero and negative allocations are rejected."""
        for amount in (0, -50):
            result = self.service.allocate(USER, "food", amount)
            self.assertFalse(result.success)
            self.assertEqual(result.message, "Amount must be greater than zero")
        self.assertEqual(self.allocated("food"), 800)

    def test_transfer_conserves_total(self):
        """Test a successful transfer keeps the pair total."""
        total = self.allocated("entertainment") + self.allocated("savings")

        result = self.service.transfer(USER, "entertainment", "savings", 150)

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Successfully transferred $150 from Entertainment to Savings")
        self.assertEqual(self.allocated("entertainment"), 250)
        self.assertEqual(self.allocated("entertainment") + self.allocated("savings"), total)
        self.assertEqual(result.from_category.allocated, 250)
        self.assertEqual(result.to_category.allocated, 1150)

    def test_transfer_insufficient_funds(self):
        """Test overdrawing the source leaves both categories unchanged."""
        result = self.service.transfer(USER, "food", "housing", 9999)

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Not enough funds in Food. Available: $800")
        self.assertEqual(self.allocated("food"), 800)
        self.assertEqual(self.allocated("housing"), 2000)

    def test_transfer_unknown_categories(self):
        """Test source and destination lookups report which side is missing."""
        result = self.service.transfer(USER, "travel", "food", 10)
        self.assertEqual(result.message, "Source category 'travel' not found")

        result = self.service.transfer(USER, "food", "travel", 10)
        self.assertEqual(result.message, "Destination category 'travel' not found")

    def test_transfer_non_positive_amount(self):
        """Test zero transfers are rejected."""
        result = self.service.transfer(USER, "food", "housing", 0)

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Amount must be greater than zero")

    def test_create_category(self):
        """Test creating a category derives its id from the name."""
        result = self.service.create_category(USER, "Gym  Membership", 45)

        self.assertTrue(result.success)
        self.assertEqual(
            result.message,
            "Successfully created new category 'Gym  Membership' with initial allocation of $45"
        )
        created = self.repository.get_category(USER, "gym-membership")
        self.assertEqual(created.allocated, 45)
        self.assertEqual(created.spent, 0)
        self.assertEqual(created.color, AVAILABLE_COLORS[0])

    def test_create_category_without_allocation(self):
        """Test the message omits the allocation suffix when none is given."""
        result = self.service.create_category(USER, "Travel")

        self.assertEqual(result.message, "Successfully created new category 'Travel'")

    def test_create_duplicate_category(self):
        """Test creating the same name twice fails the second time."""
        self.assertTrue(self.service.create_category(USER, "Travel").success)

        result = self.service.create_category(USER, "TRAVEL")

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Category 'TRAVEL' already exists")

    def test_create_category_rejects_invalid_input(self):
        """Test empty names and negative allocations."""
        self.assertEqual(self.service.create_category(USER, "   ").message, "Category name cannot be empty")
        self.assertEqual(self.service.create_category(USER, "Pets", -1).message, "Amount cannot be negative")
        self.assertIsNone(self.repository.get_category(USER, "pets"))

    def test_update_category_amount(self):
        """Test updating then reading yields exactly the new amount."""
        result = self.service.update_category_amount(USER, "utilities", 275.5)

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Successfully updated Utilities budget from $350 to $275.5")
        self.assertEqual(self.allocated("utilities"), 275.5)

    def test_update_category_below_spent(self):
        """Test updates are not floored at the spent amount."""
        result = self.service.update_category_amount(USER, "housing", 100)

        self.assertTrue(result.success)
        self.assertEqual(self.allocated("housing"), 100)

    def test_update_category_negative(self):
        """Test negative updates are rejected."""
        result = self.service.update_category_amount(USER, "food", -1)

        self.assertFalse(result.success)
        self.assertEqual(result.message, "Amount cannot be negative")
        self.assertEqual(self.allocated("food"), 800)

    def test_users_are_isolated(self):
        """Test one user's categories are invisible to another."""
        result = self.service.allocate("user-2", "housing", 100)

        self.assertFalse(result.success)
        self.assertEqual(self.service.get_categories("user-2"), [])

    def test_seed_defaults(self):
        """Test seeding creates only missing starter categories."""
        self.assertEqual(self.service.seed_defaults("user-2"), 8)
        self.assertEqual(self.service.seed_defaults("user-2"), 0)
        spending = self.repository.get_category("user-2", "spending")
        self.assertEqual(spending.name, "Weekly Spending")


if __name__ == "__main__":
    unittest.main()
