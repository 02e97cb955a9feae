"""Document and chunk tables, including vector similarity search."""
import json
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from .models import ChunkMatch, Document, DocumentChunk, STATUSES
from finsight.storage.database import Database
from finsight.utils.exceptions import ValidationError
from finsight.utils.logger import get_logger

logger = get_logger()


class DocumentRepository:
    """Reads and writes documents and their chunks."""

    def __init__(self, database: Database):
        self.database = database

    def create_document(self, document: Document) -> Document:
        with self.database.connect() as conn:
            conn.execute(
                "INSERT INTO documents (id, user_id, file_name, storage_path, uploaded_at, status, error) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (document.id, document.user_id, document.file_name, document.storage_path,
                 document.uploaded_at.isoformat(), document.status, document.error)
            )
        return document

    def get_document(self, user_id: str, document_id: str) -> Optional[Document]:
        """Return the document only when it belongs to user_id."""
        with self.database.connect() as conn:
            row = conn.execute(
                "SELECT * FROM documents WHERE id = ? AND user_id = ?", (document_id, user_id)
            ).fetchone()
        return self._to_document(row) if row else None

    def list_documents(self, user_id: str) -> List[Document]:
        with self.database.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM documents WHERE user_id = ? ORDER BY uploaded_at DESC", (user_id,)
            ).fetchall()
        return [self._to_document(row) for row in rows]

    def set_status(self, document_id: str, status: str, error: Optional[str] = None) -> None:
        if status not in STATUSES:
            raise ValidationError(f"Unknown document status '{status}'")
        with self.database.connect() as conn:
            conn.execute(
                "UPDATE documents SET status = ?, error = ? WHERE id = ?", (status, error, document_id)
            )
        logger.debug(f"Document {document_id} is now {status}")

    def delete_document(self, document_id: str) -> None:
        with self.database.connect() as conn:
            conn.execute("DELETE FROM document_chunks WHERE document_id = ?", (document_id,))
            conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))

    def insert_chunks(self, chunks: Sequence[DocumentChunk]) -> None:
        with self.database.connect() as conn:
            conn.executemany(
                "INSERT INTO document_chunks (id, document_id, user_id, content, embedding) "
                "VALUES (?, ?, ?, ?, ?)",
                [
                    (chunk.id, chunk.document_id, chunk.user_id, chunk.content,
                     json.dumps(chunk.embedding) if chunk.embedding is not None else None)
                    for chunk in chunks
                ]
            )

    def delete_chunks(self, document_id: str) -> int:
        with self.database.connect() as conn:
            cursor = conn.execute("DELETE FROM document_chunks WHERE document_id = ?", (document_id,))
            return cursor.rowcount

    def count_chunks(self, document_id: str, user_id: str) -> int:
        with self.database.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM document_chunks WHERE document_id = ? AND user_id = ?",
                (document_id, user_id)
            ).fetchone()
        return row[0]

    def get_chunks(self, document_id: str, user_id: str) -> List[DocumentChunk]:
        with self.database.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM document_chunks WHERE document_id = ? AND user_id = ? ORDER BY rowid",
                (document_id, user_id)
            ).fetchall()
        return [
            DocumentChunk(
                id=row["id"],
                document_id=row["document_id"],
                user_id=row["user_id"],
                content=row["content"],
                embedding=json.loads(row["embedding"]) if row["embedding"] else None
            )
            for row in rows
        ]

    def fetch_chunks(self, document_id: str, user_id: str, limit: int = 5) -> List[ChunkMatch]:
        """Unscored fetch of the first chunks of a document."""
        with self.database.connect() as conn:
            rows = conn.execute(
                "SELECT id, content FROM document_chunks WHERE document_id = ? AND user_id = ? "
                "ORDER BY rowid LIMIT ?",
                (document_id, user_id, limit)
            ).fetchall()
        return [ChunkMatch(id=row["id"], content=row["content"]) for row in rows]

    def match_document_chunks(
        self,
        query_embedding: Sequence[float],
        match_document_id: str,
        match_user_id: str,
        match_threshold: float = 0.5,
        match_count: int = 5
    ) -> List[ChunkMatch]:
        """
        Cosine-similarity search over one document's chunks.

        Returns:
            Up to match_count chunks with similarity above match_threshold,
            most similar first
        """
        chunks = [c for c in self.get_chunks(match_document_id, match_user_id) if c.embedding]
        if not chunks:
            return []

        query = np.asarray(query_embedding, dtype=float)
        matrix = np.asarray([c.embedding for c in chunks], dtype=float)
        if matrix.shape[1] != query.shape[0]:
            raise ValueError(
                f"Query embedding has {query.shape[0]} dimensions, chunks have {matrix.shape[1]}"
            )

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        similarities = matrix @ query / np.where(norms == 0, 1e-9, norms)

        ranked = np.argsort(-similarities)
        matches = [
            ChunkMatch(id=chunks[i].id, content=chunks[i].content, similarity=float(similarities[i]))
            for i in ranked
            if similarities[i] > match_threshold
        ]
        return matches[:match_count]

    @staticmethod
    def _to_document(row) -> Document:
        return Document(
            id=row["id"],
            user_id=row["user_id"],
            file_name=row["file_name"],
            storage_path=row["storage_path"],
            uploaded_at=datetime.fromisoformat(row["uploaded_at"]),
            status=row["status"],
            error=row["error"]
        )
