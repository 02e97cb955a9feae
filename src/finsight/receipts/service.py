"""Receipt upload, lookup and deletion."""
import uuid
from datetime import datetime
from pathlib import PurePosixPath
from typing import List, Optional

from .models import Receipt, ReceiptInfo, ReceiptQuery
from finsight.storage.database import Database
from finsight.storage.object_store import ObjectStore
from finsight.utils.exceptions import NotFoundOrForbiddenError, ValidationError
from finsight.utils.logger import get_logger

logger = get_logger()

BUCKET = "receipts"

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "application/pdf": "pdf",
}


class ReceiptService:
    """Stores receipt files and their metadata."""

    def __init__(
        self,
        database: Database,
        object_store: ObjectStore,
        max_upload_mb: int = 5,
        allowed_types: Optional[List[str]] = None
    ):
        self.database = database
        self.object_store = object_store
        self.max_upload_bytes = max_upload_mb * 1024 * 1024
        self.allowed_types = allowed_types or list(EXTENSIONS)

    def upload(
        self,
        user_id: str,
        transaction_id: str,
        file_name: str,
        content_type: str,
        data: bytes
    ) -> Receipt:
        """
        Store a receipt file and record its metadata.

        Raises:
            ValidationError: If the file type is not accepted or the file is too large
        """
        if not transaction_id:
            raise ValidationError("Transaction ID is required")
        if content_type not in self.allowed_types:
            raise ValidationError(f"Unsupported receipt type '{content_type}'. Use JPG, PNG or PDF")
        if not data:
            raise ValidationError("Receipt file is empty")
        if len(data) > self.max_upload_bytes:
            raise ValidationError(
                f"Receipt must be smaller than {self.max_upload_bytes // (1024 * 1024)}MB"
            )

        extension = PurePosixPath(file_name).suffix.lstrip(".").lower() or EXTENSIONS.get(content_type, "bin")
        file_path = f"{user_id}/{transaction_id}/{uuid.uuid4()}.{extension}"
        self.object_store.upload(BUCKET, file_path, data)

        receipt = Receipt(
            id=str(uuid.uuid4()),
            transaction_id=transaction_id,
            user_id=user_id,
            file_path=file_path,
            file_name=file_name,
            file_type=content_type,
            file_size=len(data),
            uploaded_at=datetime.now()
        )
        try:
            with self.database.connect() as conn:
                conn.execute(
                    "INSERT INTO receipts (id, transaction_id, user_id, file_path, file_name, "
                    "file_type, file_size, uploaded_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (receipt.id, receipt.transaction_id, receipt.user_id, receipt.file_path,
                     receipt.file_name, receipt.file_type, receipt.file_size,
                     receipt.uploaded_at.isoformat())
                )
        except Exception:
            self.object_store.remove(BUCKET, [file_path])
            raise

        logger.info(f"Uploaded receipt {receipt.id} for transaction {transaction_id}")
        return receipt

    def get_by_transaction(self, user_id: str, transaction_id: str) -> List[Receipt]:
        return self.query(user_id, ReceiptQuery(transaction_ids=[transaction_id]))

    def query(self, user_id: str, receipt_query: ReceiptQuery) -> List[Receipt]:
        """Receipts matching the filters, newest first."""
        sql = "SELECT * FROM receipts WHERE user_id = ?"
        params: list = [user_id]

        if receipt_query.transaction_ids is not None:
            if not receipt_query.transaction_ids:
                return []
            placeholders = ", ".join("?" for _ in receipt_query.transaction_ids)
            sql += f" AND transaction_id IN ({placeholders})"
            params.extend(receipt_query.transaction_ids)
        if receipt_query.start:
            sql += " AND uploaded_at >= ?"
            params.append(receipt_query.start.isoformat())
        if receipt_query.end:
            sql += " AND uploaded_at < ?"
            params.append(receipt_query.end.isoformat())

        sql += " ORDER BY uploaded_at DESC, rowid DESC"
        if receipt_query.limit:
            sql += " LIMIT ?"
            params.append(receipt_query.limit)

        with self.database.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._to_receipt(row) for row in rows]

    def get_recent(self, user_id: str, limit: int = 5) -> List[ReceiptInfo]:
        """Newest receipts with signed URLs."""
        receipts = self.query(user_id, ReceiptQuery(limit=limit))
        return [self.to_info(receipt) for receipt in receipts]

    def delete(self, user_id: str, receipt_id: str) -> None:
        """Remove the stored file, then the metadata row."""
        with self.database.connect() as conn:
            row = conn.execute(
                "SELECT * FROM receipts WHERE id = ? AND user_id = ?", (receipt_id, user_id)
            ).fetchone()
        if row is None:
            raise NotFoundOrForbiddenError("Receipt not found or access denied")

        self.object_store.remove(BUCKET, [row["file_path"]])
        with self.database.connect() as conn:
            conn.execute("DELETE FROM receipts WHERE id = ?", (receipt_id,))
        logger.info(f"Deleted receipt {receipt_id}")

    def delete_for_transaction(self, user_id: str, transaction_id: str) -> int:
        """Remove every receipt attached to a transaction; returns how many were removed."""
        receipts = self.get_by_transaction(user_id, transaction_id)
        if not receipts:
            return 0

        self.object_store.remove(BUCKET, [receipt.file_path for receipt in receipts])
        with self.database.connect() as conn:
            conn.execute(
                "DELETE FROM receipts WHERE user_id = ? AND transaction_id = ?", (user_id, transaction_id)
            )
        logger.info(f"Deleted {len(receipts)} receipts for transaction {transaction_id}")
        return len(receipts)

    def to_info(self, receipt: Receipt) -> ReceiptInfo:
        return ReceiptInfo(
            id=receipt.id,
            transaction_id=receipt.transaction_id,
            file_path=receipt.file_path,
            file_name=receipt.file_name,
            file_type=receipt.file_type,
            file_size=receipt.file_size,
            full_url=self.object_store.create_signed_url(BUCKET, receipt.file_path)
        )

    @staticmethod
    def _to_receipt(row) -> Receipt:
        return Receipt(
            id=row["id"],
            transaction_id=row["transaction_id"],
            user_id=row["user_id"],
            file_path=row["file_path"],
            file_name=row["file_name"],
            file_type=row["file_type"],
            file_size=row["file_size"],
            uploaded_at=datetime.fromisoformat(row["uploaded_at"])
        )
