"""Document upload, listing and deletion."""
import uuid
from typing import List

from .models import Document
from .repository import DocumentRepository
from finsight.storage.object_store import ObjectStore
from finsight.utils.exceptions import NotFoundOrForbiddenError, ValidationError
from finsight.utils.logger import get_logger

logger = get_logger()

BUCKET = "documents"
PDF_CONTENT_TYPE = "application/pdf"


class DocumentService:
    """Stores uploaded PDFs and their metadata rows."""

    def __init__(self, repository: DocumentRepository, object_store: ObjectStore, max_upload_mb: int = 10):
        self.repository = repository
        self.object_store = object_store
        self.max_upload_bytes = max_upload_mb * 1024 * 1024

    def upload(self, user_id: str, file_name: str, content_type: str, data: bytes) -> Document:
        """
        Store a PDF and create a pending document.

        Raises:
            ValidationError: If the file is not a PDF or is too large
        """
        if content_type != PDF_CONTENT_TYPE:
            raise ValidationError("Please upload a PDF file")
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self.max_upload_bytes:
            raise ValidationError(
                f"File size must be less than {self.max_upload_bytes // (1024 * 1024)}MB"
            )

        document_id = str(uuid.uuid4())
        storage_path = f"{user_id}/{document_id}.pdf"
        self.object_store.upload(BUCKET, storage_path, data)

        document = Document(
            id=document_id,
            user_id=user_id,
            file_name=file_name,
            storage_path=storage_path
        )
        try:
            self.repository.create_document(document)
        except Exception:
            self.object_store.remove(BUCKET, [storage_path])
            raise

        logger.info(f"Uploaded document {document_id} ({file_name}, {len(data)} bytes)")
        return document

    def list_documents(self, user_id: str) -> List[Document]:
        return self.repository.list_documents(user_id)

    def delete(self, user_id: str, document_id: str) -> None:
        """Remove the stored file, its chunks and the document row."""
        document = self.repository.get_document(user_id, document_id)
        if document is None:
            raise NotFoundOrForbiddenError("Document not found or access denied")

        self.object_store.remove(BUCKET, [document.storage_path])
        self.repository.delete_document(document_id)
        logger.info(f"Deleted document {document_id}")
