"""Account and transaction tables."""
import uuid
from datetime import date
from typing import List, Optional

import Levenshtein

from .models import Account, Transaction, ACCOUNT_TYPES, TRANSACTION_TYPES
from finsight.storage.database import Database
from finsight.utils.exceptions import NotFoundOrForbiddenError, ValidationError
from finsight.utils.logger import get_logger

logger = get_logger()


class LedgerRepository:
    """Reads and writes accounts and transactions."""

    def __init__(self, database: Database, fuzzy_threshold: int = 3):
        """
        Initialize ledger repository.

        Args:
            database: Backing database
            fuzzy_threshold: Maximum Levenshtein distance for name lookups
        """
        self.database = database
        self.fuzzy_threshold = fuzzy_threshold

    def add_account(self, account: Account) -> Account:
        if account.type not in ACCOUNT_TYPES:
            raise ValidationError(f"Invalid account type '{account.type}'")
        with self.database.connect() as conn:
            conn.execute(
                "INSERT INTO accounts (id, user_id, institution, name, type, masked_number, "
                "current_balance, available_balance, currency, is_active) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (account.id, account.user_id, account.institution, account.name, account.type,
                 account.masked_number, account.current_balance, account.available_balance,
                 account.currency, int(account.is_active))
            )
        return account

    def list_accounts(self, user_id: str) -> List[Account]:
        with self.database.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM accounts WHERE user_id = ? ORDER BY institution, name", (user_id,)
            ).fetchall()
        return [
            Account(
                id=row["id"],
                user_id=row["user_id"],
                institution=row["institution"],
                name=row["name"],
                type=row["type"],
                masked_number=row["masked_number"],
                current_balance=row["current_balance"],
                available_balance=row["available_balance"],
                currency=row["currency"],
                is_active=bool(row["is_active"])
            )
            for row in rows
        ]

    def add_transaction(self, transaction: Transaction) -> Transaction:
        if transaction.type not in TRANSACTION_TYPES:
            raise ValidationError(f"Invalid transaction type '{transaction.type}'")
        if not transaction.description or not transaction.description.strip():
            raise ValidationError("Transaction description is required")
        if not transaction.id:
            transaction.id = str(uuid.uuid4())
        with self.database.connect() as conn:
            conn.execute(
                "INSERT INTO transactions (id, user_id, account_id, amount, currency, description, "
                "merchant, category, type, date, pending) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (transaction.id, transaction.user_id, transaction.account_id, transaction.amount,
                 transaction.currency, transaction.description, transaction.merchant,
                 transaction.category, transaction.type, transaction.date.isoformat(),
                 int(transaction.pending))
            )
        logger.info(f"Recorded transaction {transaction.id} for {transaction.user_id}")
        return transaction

    def list_transactions(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> List[Transaction]:
        """List transactions newest first, optionally bounded by date (inclusive)."""
        query = "SELECT * FROM transactions WHERE user_id = ?"
        params: list = [user_id]
        if start:
            query += " AND date >= ?"
            params.append(start.isoformat())
        if end:
            query += " AND date <= ?"
            params.append(end.isoformat())
        query += " ORDER BY date DESC"

        with self.database.connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._to_transaction(row) for row in rows]

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        with self.database.connect() as conn:
            row = conn.execute(
                "SELECT * FROM transactions WHERE id = ? AND user_id = ?", (transaction_id, user_id)
            ).fetchone()
        return self._to_transaction(row) if row else None

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        with self.database.connect() as conn:
            deleted = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?", (transaction_id, user_id)
            )
            if deleted.rowcount != 1:
                raise NotFoundOrForbiddenError("Transaction not found or access denied")
        logger.info(f"Deleted transaction {transaction_id}")

    def find_by_name(self, user_id: str, name: str) -> List[Transaction]:
        """
        Find transactions whose description or merchant loosely matches name.

        Substring matches win; otherwise the closest names within the fuzzy
        threshold are returned.
        """
        needle = self._normalize(name)
        if not needle:
            return []

        transactions = self.list_transactions(user_id)
        contained = [
            txn for txn in transactions
            if any(needle in self._normalize(field) for field in (txn.description, txn.merchant) if field)
        ]
        if contained:
            return contained

        fuzzy = []
        for txn in transactions:
            distances = [
                Levenshtein.distance(needle, self._normalize(field))
                for field in (txn.description, txn.merchant) if field
            ]
            if distances and min(distances) <= self.fuzzy_threshold:
                fuzzy.append(txn)
        logger.debug(f"Fuzzy transaction lookup '{name}' matched {len(fuzzy)} transactions")
        return fuzzy

    @staticmethod
    def _normalize(value: str) -> str:
        return value.strip().lower()

    @staticmethod
    def _to_transaction(row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            account_id=row["account_id"],
            amount=row["amount"],
            currency=row["currency"],
            description=row["description"],
            merchant=row["merchant"],
            category=row["category"],
            type=row["type"],
            date=date.fromisoformat(row["date"]),
            pending=bool(row["pending"])
        )
