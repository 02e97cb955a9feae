"""Tests for document upload, ingestion and question answering."""
import unittest
import tempfile
import shutil
from pathlib import Path
from unittest import mock

from fakes import FakeLanguageModel, FakePDFProcessor, make_pdf, statement_pages
from finsight.documents import (
    DocumentChunk,
    DocumentIngestor,
    DocumentQA,
    DocumentRepository,
    DocumentService,
    PDFProcessor,
)
from finsight.storage import Database, ObjectStore
from finsight.utils.exceptions import (
    ExternalServiceError,
    NotFoundOrForbiddenError,
    PDFError,
    StorageError,
    ValidationError,
)

USER = "user-1"


class DocumentTestCase(unittest.TestCase):
    """Shared fixtures: a database, an object store and a fake model."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.repository = DocumentRepository(Database(self.test_dir / "test.db"))
        self.store = ObjectStore(self.test_dir / "storage", "secret")
        self.documents = DocumentService(self.repository, self.store)
        self.llm = FakeLanguageModel()

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def upload(self, data=b"%PDF-1.4 placeholder", user_id=USER):
        return self.documents.upload(user_id, "statement.pdf", "application/pdf", data)


class TestDocumentService(DocumentTestCase):
    """Test DocumentService functionality."""

    def test_upload(self):
        """Test a PDF is stored under the user's folder as pending."""
        document = self.upload()

        self.assertEqual(document.storage_path, f"{USER}/{document.id}.pdf")
        self.assertEqual(document.status, "pending")
        self.assertTrue(self.store.exists("documents", document.storage_path))
        self.assertEqual(self.documents.list_documents(USER)[0].id, document.id)

    def test_upload_rejects_non_pdf_and_large_files(self):
        """Test upload validation."""
        with self.assertRaises(ValidationError):
            self.documents.upload(USER, "notes.txt", "text/plain", b"hello")

        small = DocumentService(self.repository, self.store, max_upload_mb=1)
        with self.assertRaises(ValidationError):
            small.upload(USER, "big.pdf", "application/pdf", b"0" * (1024 * 1024 + 1))

    def test_delete(self):
        """Test deleting removes the object, chunks and row."""
        document = self.upload()
        self.repository.insert_chunks([DocumentChunk("c1", document.id, USER, "text", [1.0, 0.0])])

        self.documents.delete(USER, document.id)

        self.assertFalse(self.store.exists("documents", document.storage_path))
        self.assertEqual(self.repository.count_chunks(document.id, USER), 0)
        self.assertIsNone(self.repository.get_document(USER, document.id))

    def test_delete_other_users_document(self):
        """Test ownership is enforced."""
        document = self.upload()

        with self.assertRaises(NotFoundOrForbiddenError):
            self.documents.delete("user-2", document.id)


class TestDocumentIngestor(DocumentTestCase):
    """Test DocumentIngestor functionality."""

    def ingestor(self, pages=None, **kwargs):
        processor = FakePDFProcessor(pages) if pages is not None else PDFProcessor()
        return DocumentIngestor(self.repository, self.store, self.llm, processor, **kwargs)

    def test_three_page_pdf(self):
        """Test a real PDF is chunked within size and tagged with its owner."""
        document = self.upload(make_pdf(statement_pages()))

        count = self.ingestor().process(USER, document.id, document.storage_path)

        chunks = self.repository.get_chunks(document.id, USER)
        self.assertEqual(count, len(chunks))
        self.assertGreater(count, 1)
        for chunk in chunks:
            self.assertLessEqual(len(chunk.content), 1000)
            self.assertEqual(chunk.document_id, document.id)
            self.assertEqual(chunk.user_id, USER)
            self.assertIsNotNone(chunk.embedding)
        self.assertTrue(chunks[0].content.startswith("Page 1 line 1"))
        self.assertEqual(self.repository.get_document(USER, document.id).status, "ready")

    def test_embeds_in_batches(self):
        """Test chunks are embedded five at a time as documents."""
        document = self.upload()
        pages = ["\n\n".join(f"Paragraph {i} " + "z" * 590 for i in range(12))]

        count = self.ingestor(pages).process(USER, document.id, document.storage_path)

        self.assertEqual(count, 12)
        self.assertEqual([len(texts) for texts, _ in self.llm.embed_calls], [5, 5, 2])
        self.assertEqual({task for _, task in self.llm.embed_calls}, {"RETRIEVAL_DOCUMENT"})

    def test_failure_removes_partial_chunks(self):
        """Test a failing batch leaves no chunks and marks the document failed."""
        self.llm.fail_on_embed_call = 2
        document = self.upload()
        pages = ["\n\n".join("w" * 900 for _ in range(8))]

        with self.assertRaises(ExternalServiceError):
            self.ingestor(pages).process(USER, document.id, document.storage_path)

        failed = self.repository.get_document(USER, document.id)
        self.assertEqual(self.repository.count_chunks(document.id, USER), 0)
        self.assertEqual(failed.status, "failed")
        self.assertIn("quota exceeded", failed.error)

    def test_reprocessing_replaces_chunks(self):
        """Test running twice does not duplicate chunks."""
        document = self.upload()
        ingestor = self.ingestor(["Rent was paid.\n\nSalary arrived."])

        first = ingestor.process(USER, document.id, document.storage_path)
        second = ingestor.process(USER, document.id, document.storage_path)

        self.assertEqual(first, second)
        self.assertEqual(self.repository.count_chunks(document.id, USER), first)

    def test_other_users_document(self):
        """Test processing a document owned by someone else."""
        document = self.upload()

        with self.assertRaises(NotFoundOrForbiddenError) as context:
            self.ingestor(["text"]).process("user-2", document.id, document.storage_path)
        self.assertEqual(str(context.exception), "Document not found or access denied")

    def test_file_path_must_match(self):
        """Test the storage path has to be the document's own."""
        document = self.upload()

        with self.assertRaises(ValidationError):
            self.ingestor(["text"]).process(USER, document.id, "user-1/other.pdf")

    def test_missing_file(self):
        """Test a download failure marks the document failed."""
        document = self.upload()
        self.store.remove("documents", [document.storage_path])

        with self.assertRaises(StorageError) as context:
            self.ingestor(["text"]).process(USER, document.id, document.storage_path)

        self.assertIn("Failed to download file", str(context.exception))
        self.assertEqual(self.repository.get_document(USER, document.id).status, "failed")

    def test_unreadable_pdf(self):
        """Test bytes that are not a PDF fail extraction."""
        document = self.upload(b"not a pdf at all")

        with self.assertRaises(PDFError):
            self.ingestor().process(USER, document.id, document.storage_path)
        self.assertEqual(self.repository.get_document(USER, document.id).status, "failed")


class TestDocumentQA(DocumentTestCase):
    """Test DocumentQA functionality."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.document = self.upload()
        self.qa = DocumentQA(self.repository, self.llm)

    def index(self, *texts):
        self.repository.insert_chunks([
            DocumentChunk(f"chunk-{i}", self.document.id, USER, text, FakeLanguageModel.vector(text))
            for i, text in enumerate(texts)
        ])

    def test_no_chunks(self):
        """Test asking before ingestion."""
        with self.assertRaises(NotFoundOrForbiddenError) as context:
            self.qa.ask(USER, self.document.id, "What is my rent?")

        self.assertEqual(str(context.exception), "No document chunks found")
        self.assertEqual(self.llm.embed_calls, [])

    def test_answer_uses_matching_chunks(self):
        """Test only similar chunks reach the prompt."""
        self.index("Rent of $1,200 is due monthly.", "Salary is deposited on the 25th.")

        answer = self.qa.ask(USER, self.document.id, "  How much is the rent?  ")

        self.assertEqual(answer.answer, "Your rent is $1,200 per month.")
        self.assertEqual(answer.document, "statement.pdf")
        self.assertEqual([s.content for s in answer.sources], ["Rent of $1,200 is due monthly."])
        self.assertEqual(self.llm.embed_calls, [(["How much is the rent?"], "RETRIEVAL_QUERY")])

        call = self.llm.complete_calls[0]
        self.assertEqual(call["temperature"], 0.0)
        self.assertEqual(call["max_tokens"], 500)
        self.assertIn("CONTEXT:\nRent of $1,200 is due monthly.", call["prompt"])
        self.assertIn("QUESTION:\nHow much is the rent?", call["prompt"])
        self.assertEqual(
            answer.to_dict(),
            {
                "answer": "Your rent is $1,200 per month.",
                "sources": [{"content": "Rent of $1,200 is due monthly."}],
                "document": "statement.pdf",
            }
        )

    def test_fallback_when_search_fails(self):
        """Test an unscored fetch replaces a failing similarity search."""
        self.index("Rent of $1,200 is due monthly.", "Salary is deposited on the 25th.")

        with mock.patch.object(self.repository, "match_document_chunks", side_effect=RuntimeError("no index")):
            answer = self.qa.ask(USER, self.document.id, "How much is the rent?")

        self.assertEqual(len(answer.sources), 2)
        self.assertIsNone(answer.sources[0].similarity)
        self.assertIn("Rent of $1,200 is due monthly.\n\nSalary is deposited on the 25th.",
                      self.llm.complete_calls[0]["prompt"])

    def test_other_users_document(self):
        """Test ownership is enforced."""
        self.index("Rent of $1,200 is due monthly.")

        with self.assertRaises(NotFoundOrForbiddenError) as context:
            self.qa.ask("user-2", self.document.id, "How much is the rent?")
        self.assertEqual(str(context.exception), "Document not found or access denied")

    def test_blank_question(self):
        """Test whitespace-only questions are rejected."""
        with self.assertRaises(ValidationError):
            self.qa.ask(USER, self.document.id, "   ")


class TestMatchDocumentChunks(DocumentTestCase):
    """Test cosine similarity search."""

    def test_threshold_order_and_count(self):
        """Test results above the threshold, most similar first."""
        document = self.upload()
        self.repository.insert_chunks([
            DocumentChunk("far", document.id, USER, "far", [0.0, 1.0]),
            DocumentChunk("near", document.id, USER, "near", [0.9, 0.1]),
            DocumentChunk("exact", document.id, USER, "exact", [1.0, 0.0]),
            DocumentChunk("other-user", document.id, "user-2", "other", [1.0, 0.0]),
        ])

        matches = self.repository.match_document_chunks([1.0, 0.0], document.id, USER, 0.5, 5)

        self.assertEqual([m.id for m in matches], ["exact", "near"])
        self.assertAlmostEqual(matches[0].similarity, 1.0)

        top = self.repository.match_document_chunks([1.0, 0.0], document.id, USER, 0.5, 1)
        self.assertEqual([m.id for m in top], ["exact"])

    def test_dimension_mismatch(self):
        """Test vectors of different sizes raise."""
        document = self.upload()
        self.repository.insert_chunks([DocumentChunk("c", document.id, USER, "c", [1.0, 0.0])])

        with self.assertRaises(ValueError):
            self.repository.match_document_chunks([1.0, 0.0, 0.0], document.id, USER)


if __name__ == "__main__":
    unittest.main()
