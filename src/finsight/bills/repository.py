"""Bill table access."""
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional

from .models import Bill, BILL_FREQUENCIES, BILL_STATUSES
from finsight.storage.database import Database
from finsight.utils.exceptions import InvalidAmountError, NotFoundOrForbiddenError, ValidationError
from finsight.utils.logger import get_logger

logger = get_logger()

UPDATABLE_FIELDS = (
    "name", "amount", "due_date", "category", "frequency", "status",
    "auto_pay", "payment_method_id", "next_due_date", "notes",
)


class BillRepository:
    """Creates, lists, updates and deletes a user's bills."""

    def __init__(self, database: Database):
        self.database = database

    def add_bill(self, bill: Bill) -> Bill:
        """
        Insert a bill.

        Raises:
            ValidationError: If a field is outside its accepted values
        """
        self._validate(bill)
        now = datetime.now()
        bill = replace(bill, id=bill.id or str(uuid.uuid4()), created_at=now, updated_at=now)

        with self.database.connect() as conn:
            conn.execute(
                "INSERT INTO bills (id, user_id, name, amount, due_date, category, frequency, status, "
                "auto_pay, payment_method_id, next_due_date, notes, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                self._to_row(bill)
            )
        logger.info(f"Added bill {bill.id} ({bill.name})")
        return bill

    def list_bills(self, user_id: str) -> List[Bill]:
        """Bills ordered by next due date, soonest first."""
        with self.database.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM bills WHERE user_id = ? ORDER BY next_due_date, rowid", (user_id,)
            ).fetchall()
        return [self._to_bill(row) for row in rows]

    def get_bill(self, user_id: str, bill_id: str) -> Optional[Bill]:
        with self.database.connect() as conn:
            row = conn.execute(
                "SELECT * FROM bills WHERE id = ? AND user_id = ?", (bill_id, user_id)
            ).fetchone()
        return self._to_bill(row) if row else None

    def update_bill(self, user_id: str, bill_id: str, **changes) -> Bill:
        """
        Apply a partial update.

        Raises:
            NotFoundOrForbiddenError: If the bill does not exist for this user
            ValidationError: If an unknown field is named or a value is invalid
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update bill fields: {', '.join(sorted(unknown))}")

        bill = self.get_bill(user_id, bill_id)
        if bill is None:
            raise NotFoundOrForbiddenError("Bill not found or access denied")
        if not changes:
            return bill

        updated = replace(bill, updated_at=datetime.now(), **changes)
        self._validate(updated)
        with self.database.connect() as conn:
            conn.execute(
                "UPDATE bills SET name = ?, amount = ?, due_date = ?, category = ?, frequency = ?, "
                "status = ?, auto_pay = ?, payment_method_id = ?, next_due_date = ?, notes = ?, "
                "updated_at = ? WHERE id = ? AND user_id = ?",
                (updated.name, updated.amount, updated.due_date, updated.category, updated.frequency,
                 updated.status, int(updated.auto_pay), updated.payment_method_id,
                 updated.next_due_date.isoformat(), updated.notes, updated.updated_at.isoformat(),
                 bill_id, user_id)
            )
        logger.info(f"Updated bill {bill_id}: {', '.join(sorted(changes))}")
        return updated

    def mark_paid(self, user_id: str, bill_id: str) -> Bill:
        return self.update_bill(user_id, bill_id, status="paid")

    def delete_bill(self, user_id: str, bill_id: str) -> None:
        with self.database.connect() as conn:
            deleted = conn.execute("DELETE FROM bills WHERE id = ? AND user_id = ?", (bill_id, user_id))
            if deleted.rowcount != 1:
                raise NotFoundOrForbiddenError("Bill not found or access denied")
        logger.info(f"Deleted bill {bill_id}")

    def refresh_overdue(self, user_id: str, today: Optional[date] = None) -> int:
        """Mark upcoming bills whose due date has passed as overdue; returns how many changed."""
        today = today or date.today()
        with self.database.connect() as conn:
            changed = conn.execute(
                "UPDATE bills SET status = 'overdue', updated_at = ? "
                "WHERE user_id = ? AND status = 'upcoming' AND next_due_date < ?",
                (datetime.now().isoformat(), user_id, today.isoformat())
            ).rowcount
        if changed:
            logger.info(f"Marked {changed} bills overdue for {user_id}")
        return changed

    @staticmethod
    def _validate(bill: Bill) -> None:
        if not bill.name or not bill.name.strip():
            raise ValidationError("Bill name is required")
        if bill.amount is None or bill.amount <= 0:
            raise InvalidAmountError("Amount must be greater than zero")
        if not 1 <= bill.due_date <= 31:
            raise ValidationError("Due date must be a day of the month between 1 and 31")
        if bill.frequency not in BILL_FREQUENCIES:
            raise ValidationError(f"Invalid bill frequency '{bill.frequency}'")
        if bill.status not in BILL_STATUSES:
            raise ValidationError(f"Invalid bill status '{bill.status}'")

    @staticmethod
    def _to_row(bill: Bill) -> tuple:
        return (
            bill.id, bill.user_id, bill.name, bill.amount, bill.due_date, bill.category,
            bill.frequency, bill.status, int(bill.auto_pay), bill.payment_method_id,
            bill.next_due_date.isoformat(), bill.notes,
            bill.created_at.isoformat(), bill.updated_at.isoformat()
        )

    @staticmethod
    def _to_bill(row) -> Bill:
        return Bill(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            amount=row["amount"],
            due_date=row["due_date"],
            category=row["category"],
            frequency=row["frequency"],
            status=row["status"],
            auto_pay=bool(row["auto_pay"]),
            payment_method_id=row["payment_method_id"],
            next_due_date=date.fromisoformat(row["next_due_date"]),
            notes=row["notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"])
        )
