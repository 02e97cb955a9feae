"""Document ingestion and question answering."""
from .models import Document, DocumentChunk, ChunkMatch, Answer
from .chunker import split_into_chunks
from .processor import PDFProcessor
from .repository import DocumentRepository
from .service import DocumentService
from .ingestion import DocumentIngestor
from .qa import DocumentQA

__all__ = [
    "Document",
    "DocumentChunk",
    "ChunkMatch",
    "Answer",
    "split_into_chunks",
    "PDFProcessor",
    "DocumentRepository",
    "DocumentService",
    "DocumentIngestor",
    "DocumentQA",
]
