"""Wires configuration, storage and services together."""
from typing import Optional

from finsight.bills import BillRepository
from finsight.budget import FundService, SqliteBudgetRepository
from finsight.chat import CommandInterpreter
from finsight.config import AppSettings, Config
from finsight.documents import DocumentIngestor, DocumentQA, DocumentRepository, DocumentService
from finsight.ledger import LedgerRepository
from finsight.llm import GeminiClient, LanguageModel
from finsight.receipts import ReceiptService
from finsight.storage import Database, ObjectStore
from finsight.utils.logger import get_logger

logger = get_logger()


class ServiceContainer:
    """Builds every service once from validated configuration."""

    def __init__(self, config: Config, settings: AppSettings, llm: Optional[LanguageModel] = None):
        """
        Initialize container.

        Args:
            config: Validated system configuration
            settings: Application tunables
            llm: Language model override, a Gemini client is created on first use otherwise
        """
        self.config = config
        self.settings = settings

        self.database = Database(config.database_path)
        self.object_store = ObjectStore(
            config.storage_path,
            config.service_key,
            settings.signed_url_seconds
        )

        self.fund_service = FundService(SqliteBudgetRepository(self.database))
        self.ledger = LedgerRepository(self.database)
        self.bills = BillRepository(self.database)
        self.receipt_service = ReceiptService(
            self.database,
            self.object_store,
            settings.receipt_max_upload_mb,
            settings.receipt_allowed_types
        )
        self.interpreter = CommandInterpreter(self.fund_service, self.receipt_service, self.ledger)

        self.document_repository = DocumentRepository(self.database)
        self.document_service = DocumentService(
            self.document_repository,
            self.object_store,
            settings.document_max_upload_mb
        )

        self._llm = llm
        self._ingestor: Optional[DocumentIngestor] = None
        self._qa: Optional[DocumentQA] = None

        logger.info(f"Services initialized with database {config.database_path}")

    @property
    def llm(self) -> LanguageModel:
        if self._llm is None:
            self._llm = GeminiClient(
                self.config.gemini_api_key,
                embedding_model=self.settings.embedding_model,
                completion_model=self.settings.completion_model,
                max_retries=self.settings.llm_max_retries,
                initial_delay=self.settings.llm_initial_delay_seconds,
                backoff_factor=self.settings.llm_backoff_factor
            )
        return self._llm

    @property
    def ingestor(self) -> DocumentIngestor:
        if self._ingestor is None:
            self._ingestor = DocumentIngestor(
                self.document_repository,
                self.object_store,
                self.llm,
                chunk_size=self.settings.chunk_size,
                batch_size=self.settings.embedding_batch_size
            )
        return self._ingestor

    @property
    def qa(self) -> DocumentQA:
        if self._qa is None:
            self._qa = DocumentQA(
                self.document_repository,
                self.llm,
                match_threshold=self.settings.match_threshold,
                match_count=self.settings.match_count,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_answer_tokens
            )
        return self._qa

    def ensure_budget(self, user_id: str) -> None:
        """Give a user with no categories the starter set."""
        if not self.fund_service.get_categories(user_id):
            self.fund_service.seed_defaults(user_id)
