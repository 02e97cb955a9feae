"""Turn an uploaded PDF into embedded chunks."""
import uuid
from typing import List

from .chunker import split_into_chunks
from .models import DocumentChunk, FAILED, PROCESSING, READY
from .processor import PDFProcessor
from .repository import DocumentRepository
from .service import BUCKET
from finsight.llm.base import LanguageModel
from finsight.storage.object_store import ObjectStore
from finsight.utils.exceptions import (
    ExternalServiceError,
    NotFoundOrForbiddenError,
    PDFError,
    StorageError,
    ValidationError,
)
from finsight.utils.logger import get_logger

logger = get_logger()


class DocumentIngestor:
    """Extracts, chunks, embeds and stores one document at a time.

    The document moves pending -> processing -> ready, or to failed with the
    error recorded. A failed run leaves no chunks behind.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        object_store: ObjectStore,
        llm: LanguageModel,
        pdf_processor: PDFProcessor = None,
        chunk_size: int = 1000,
        batch_size: int = 5
    ):
        self.repository = repository
        self.object_store = object_store
        self.llm = llm
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.chunk_size = chunk_size
        self.batch_size = batch_size

    def process(self, user_id: str, document_id: str, file_path: str) -> int:
        """
        Index a document owned by user_id.

        Args:
            user_id: Caller identity
            document_id: Document to index
            file_path: Storage path of the uploaded PDF

        Returns:
            Number of chunks stored

        Raises:
            NotFoundOrForbiddenError: If the document is absent or not owned by the caller
        """
        document = self.repository.get_document(user_id, document_id)
        if document is None:
            raise NotFoundOrForbiddenError("Document not found or access denied")
        if file_path != document.storage_path:
            raise ValidationError("File path does not match the document")

        self.repository.set_status(document_id, PROCESSING)
        logger.info(f"Processing document {document_id} ({document.file_name})")

        try:
            try:
                data = self.object_store.download(BUCKET, file_path)
            except StorageError as e:
                raise StorageError(f"Failed to download file: {e}")

            pages = self.pdf_processor.extract_pages(data, document.file_name)
            chunks = split_into_chunks("\n\n".join(pages), self.chunk_size)
            if not chunks:
                raise PDFError(f"No text could be extracted from {document.file_name}")

            # Re-processing replaces whatever an earlier run stored
            self.repository.delete_chunks(document_id)
            stored = self._embed_and_store(user_id, document_id, chunks)
        except Exception as e:
            removed = self.repository.delete_chunks(document_id)
            self.repository.set_status(document_id, FAILED, str(e))
            logger.error(f"Processing failed for document {document_id}, removed {removed} partial chunks: {e}")
            raise

        self.repository.set_status(document_id, READY)
        logger.info(f"Document {document_id} processed into {stored} chunks")
        return stored

    def _embed_and_store(self, user_id: str, document_id: str, chunks: List[str]) -> int:
        stored = 0
        for start in range(0, len(chunks), self.batch_size):
            batch = chunks[start:start + self.batch_size]
            embeddings = self.llm.embed(batch, task_type="RETRIEVAL_DOCUMENT")
            if len(embeddings) != len(batch):
                raise ExternalServiceError(
                    f"Expected {len(batch)} embeddings, received {len(embeddings)}"
                )

            self.repository.insert_chunks([
                DocumentChunk(
                    id=str(uuid.uuid4()),
                    document_id=document_id,
                    user_id=user_id,
                    content=content,
                    embedding=embedding
                )
                for content, embedding in zip(batch, embeddings)
            ])
            stored += len(batch)
            logger.debug(f"Stored batch {start // self.batch_size + 1} ({len(batch)} chunks)")
        return stored
