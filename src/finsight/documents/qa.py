"""Retrieval-augmented question answering over a document."""
from .models import Answer
from .repository import DocumentRepository
from finsight.llm.base import LanguageModel
from finsight.utils.exceptions import NotFoundOrForbiddenError, ValidationError
from finsight.utils.logger import get_logger

logger = get_logger()

SYSTEM_INSTRUCTION = (
    "You are a helpful AI assistant that answers questions based only on the provided "
    "document context. If the context does not contain the answer, say so."
)


def build_prompt(context: str, question: str) -> str:
    return (
        "You are an AI assistant helping with document questions. Please answer the following "
        "question based only on the provided context.\n\n"
        f"CONTEXT:\n{context}\n\n"
        f"QUESTION:\n{question}\n\n"
        "ANSWER:"
    )


class DocumentQA:
    """Answers questions from the most similar chunks of one document."""

    def __init__(
        self,
        repository: DocumentRepository,
        llm: LanguageModel,
        match_threshold: float = 0.5,
        match_count: int = 5,
        temperature: float = 0.0,
        max_tokens: int = 500
    ):
        self.repository = repository
        self.llm = llm
        self.match_threshold = match_threshold
        self.match_count = match_count
        self.temperature = temperature
        self.max_tokens = max_tokens

    def ask(self, user_id: str, document_id: str, question: str) -> Answer:
        """
        Answer a question about a document owned by user_id.

        Raises:
            ValidationError: If the question is blank
            NotFoundOrForbiddenError: If the document is not the caller's or has no chunks
        """
        question = (question or "").strip()
        if not question:
            raise ValidationError("Question and document ID are required")

        document = self.repository.get_document(user_id, document_id)
        if document is None:
            raise NotFoundOrForbiddenError("Document not found or access denied")
        if self.repository.count_chunks(document_id, user_id) == 0:
            raise NotFoundOrForbiddenError("No document chunks found")

        [query_embedding] = self.llm.embed([question], task_type="RETRIEVAL_QUERY")

        try:
            chunks = self.repository.match_document_chunks(
                query_embedding=query_embedding,
                match_document_id=document_id,
                match_user_id=user_id,
                match_threshold=self.match_threshold,
                match_count=self.match_count
            )
        except Exception as e:
            logger.warning(f"Similarity search failed for document {document_id}, using unscored chunks: {e}")
            chunks = self.repository.fetch_chunks(document_id, user_id, self.match_count)
            if not chunks:
                raise NotFoundOrForbiddenError("No document chunks found")

        context = "\n\n".join(chunk.content for chunk in chunks)
        answer = self.llm.complete(
            SYSTEM_INSTRUCTION,
            build_prompt(context, question),
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )

        logger.info(f"Answered question on document {document_id} from {len(chunks)} chunks")
        return Answer(answer=answer.strip(), sources=chunks, document=document.file_name)
