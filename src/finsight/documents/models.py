"""Data models for documents and their chunks."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

PENDING = "pending"
PROCESSING = "processing"
READY = "ready"
FAILED = "failed"

STATUSES = (PENDING, PROCESSING, READY, FAILED)


@dataclass
class Document:
    """Uploaded PDF metadata."""
    id: str
    user_id: str
    file_name: str
    storage_path: str
    uploaded_at: datetime = field(default_factory=datetime.now)
    status: str = PENDING
    error: Optional[str] = None


@dataclass
class DocumentChunk:
    """A bounded slice of document text with its embedding."""
    id: str
    document_id: str
    user_id: str
    content: str
    embedding: Optional[List[float]] = None


@dataclass
class ChunkMatch:
    """Chunk returned by retrieval; similarity is None for unscored fetches."""
    id: str
    content: str
    similarity: Optional[float] = None


@dataclass
class Answer:
    """Retrieval-augmented answer to a document question."""
    answer: str
    sources: List[ChunkMatch]
    document: str

    def to_dict(self) -> dict:
        return {
            "answer": self.answer,
            "sources": [{"content": source.content} for source in self.sources],
            "document": self.document,
        }
