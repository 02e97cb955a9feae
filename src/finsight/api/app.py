"""FastAPI application exposing the document, chat, budget, ledger, bill and receipt endpoints."""
import mimetypes
import threading
import uuid
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Header, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .schemas import (
    AccountCreateRequest,
    AskDocumentRequest,
    BillCreateRequest,
    BillUpdateRequest,
    ChatRequest,
    ProcessDocumentRequest,
    TransactionCreateRequest,
)
from finsight.bills import Bill, monthly_total
from finsight.config import AppSettings, Config, ConfigManager, get_settings
from finsight.container import ServiceContainer
from finsight.ledger import Account, Transaction
from finsight.llm import LanguageModel
from finsight.utils.auth import extract_bearer_token, verify_token
from finsight.utils.exceptions import (
    ConfigurationError,
    FinSightError,
    NotFoundOrForbiddenError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from finsight.utils.logger import get_logger, reset_user_context, set_user_context

logger = get_logger()


def create_app(
    config: Optional[Config] = None,
    settings: Optional[AppSettings] = None,
    llm: Optional[LanguageModel] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        config: System configuration, read from the environment when omitted
        settings: Application tunables, loaded from config.yaml when omitted
        llm: Language model override used instead of Gemini

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    config_manager = ConfigManager()

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    app.state.settings = settings
    app.state.config = config
    app.state.container = None
    container_lock = threading.Lock()

    def get_container() -> ServiceContainer:
        """Build services on first use so missing secrets surface per request."""
        with container_lock:
            if app.state.container is None:
                current = app.state.config or config_manager.load_config()
                config_manager.require_valid(current)
                app.state.config = current
                app.state.container = ServiceContainer(current, settings, llm)
            return app.state.container

    def authenticate(authorization: Optional[str]):
        token = extract_bearer_token(authorization)
        container = get_container()
        user_id = verify_token(token, container.config.service_key)
        set_user_context(user_id)
        return container, user_id

    async def current_user(authorization: Optional[str] = Header(default=None)):
        # Async so the user context is set in the request task and copied into the endpoint thread
        return authenticate(authorization)

    @app.middleware("http")
    async def user_log_context(request: Request, call_next):
        token = set_user_context(None)
        try:
            return await call_next(request)
        finally:
            reset_user_context(token)

    @app.exception_handler(FinSightError)
    async def handle_finsight_error(request: Request, exc: FinSightError):
        if isinstance(exc, ConfigurationError):
            logger.error(str(exc))
            message = "Server configuration error"
        else:
            message = str(exc)
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected request body for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.post("/functions/processDocument")
    def process_document(body: ProcessDocumentRequest, authorization: Optional[str] = Header(default=None)):
        if not body.document_id or not body.file_path:
            raise ValidationError("Document ID and file path are required")

        container, user_id = authenticate(authorization)
        chunk_count = container.ingestor.process(user_id, body.document_id, body.file_path)
        return {"message": "Document processed successfully", "chunkCount": chunk_count}

    @app.post("/functions/askDocument")
    def ask_document(body: AskDocumentRequest, authorization: Optional[str] = Header(default=None)):
        if not body.question or not body.question.strip() or not body.document_id:
            raise ValidationError("Question and document ID are required")

        container, user_id = authenticate(authorization)
        answer = container.qa.ask(user_id, body.document_id, body.question)
        return answer.to_dict()

    @app.post("/chat")
    def chat(body: ChatRequest, auth=Depends(current_user)):
        container, user_id = auth
        if not body.message or not body.message.strip():
            raise ValidationError("Message is required")

        container.ensure_budget(user_id)
        reply = container.interpreter.respond(user_id, body.message)
        return jsonable_encoder({
            "response": reply.content,
            "action": reply.action,
            "receipts": reply.receipts,
            "insights": reply.insights,
        })

    @app.get("/budget/categories")
    def list_categories(auth=Depends(current_user)):
        container, user_id = auth
        container.ensure_budget(user_id)
        return jsonable_encoder({"categories": container.fund_service.get_categories(user_id)})

    @app.post("/documents", status_code=201)
    def upload_document(file: UploadFile = File(...), auth=Depends(current_user)):
        container, user_id = auth
        document = container.document_service.upload(
            user_id, file.filename or "document.pdf", file.content_type, file.file.read()
        )
        return jsonable_encoder(document)

    @app.get("/documents")
    def list_documents(auth=Depends(current_user)):
        container, user_id = auth
        return jsonable_encoder({"documents": container.document_service.list_documents(user_id)})

    @app.delete("/documents/{document_id}")
    def delete_document(document_id: str, auth=Depends(current_user)):
        container, user_id = auth
        container.document_service.delete(user_id, document_id)
        return {"message": "Document deleted successfully"}

    @app.post("/accounts", status_code=201)
    def create_account(body: AccountCreateRequest, auth=Depends(current_user)):
        container, user_id = auth
        account = container.ledger.add_account(Account(
            id=str(uuid.uuid4()),
            user_id=user_id,
            institution=body.institution,
            name=body.name,
            type=body.type,
            masked_number=body.masked_number,
            current_balance=body.current_balance,
            available_balance=body.available_balance,
            currency=body.currency
        ))
        return jsonable_encoder(account)

    @app.get("/accounts")
    def list_accounts(auth=Depends(current_user)):
        container, user_id = auth
        return jsonable_encoder({"accounts": container.ledger.list_accounts(user_id)})

    @app.post("/transactions", status_code=201)
    def create_transaction(body: TransactionCreateRequest, auth=Depends(current_user)):
        container, user_id = auth
        transaction = container.ledger.add_transaction(Transaction(
            id="",
            user_id=user_id,
            amount=body.amount,
            description=body.description,
            type=body.type,
            date=body.date or date.today(),
            account_id=body.account_id,
            currency=body.currency,
            merchant=body.merchant,
            category=body.category,
            pending=body.pending
        ))
        return jsonable_encoder(transaction)

    @app.get("/transactions")
    def list_transactions(
        start: Optional[date] = Query(default=None),
        end: Optional[date] = Query(default=None),
        auth=Depends(current_user)
    ):
        container, user_id = auth
        return jsonable_encoder({"transactions": container.ledger.list_transactions(user_id, start, end)})

    @app.delete("/transactions/{transaction_id}")
    def delete_transaction(transaction_id: str, auth=Depends(current_user)):
        container, user_id = auth
        if container.ledger.get_transaction(user_id, transaction_id) is None:
            raise NotFoundOrForbiddenError("Transaction not found or access denied")

        removed = container.receipt_service.delete_for_transaction(user_id, transaction_id)
        container.ledger.delete_transaction(user_id, transaction_id)
        return {"message": "Transaction deleted successfully", "receiptsDeleted": removed}

    @app.post("/bills", status_code=201)
    def create_bill(body: BillCreateRequest, auth=Depends(current_user)):
        container, user_id = auth
        bill = container.bills.add_bill(Bill(id="", user_id=user_id, **body.model_dump()))
        return jsonable_encoder(bill)

    @app.get("/bills")
    def list_bills(auth=Depends(current_user)):
        container, user_id = auth
        container.bills.refresh_overdue(user_id)
        bills = container.bills.list_bills(user_id)
        return jsonable_encoder({"bills": bills, "monthlyTotal": monthly_total(bills)})

    @app.patch("/bills/{bill_id}")
    def update_bill(bill_id: str, body: BillUpdateRequest, auth=Depends(current_user)):
        container, user_id = auth
        changes = body.model_dump(exclude_unset=True, exclude_none=True)
        return jsonable_encoder(container.bills.update_bill(user_id, bill_id, **changes))

    @app.post("/bills/{bill_id}/pay")
    def pay_bill(bill_id: str, auth=Depends(current_user)):
        container, user_id = auth
        return jsonable_encoder(container.bills.mark_paid(user_id, bill_id))

    @app.delete("/bills/{bill_id}")
    def delete_bill(bill_id: str, auth=Depends(current_user)):
        container, user_id = auth
        container.bills.delete_bill(user_id, bill_id)
        return {"message": "Bill deleted successfully"}

    @app.post("/receipts", status_code=201)
    def upload_receipt(
        file: UploadFile = File(...),
        transaction_id: Optional[str] = Form(default=None, alias="transactionId"),
        auth=Depends(current_user)
    ):
        container, user_id = auth
        if transaction_id and container.ledger.get_transaction(user_id, transaction_id) is None:
            raise NotFoundOrForbiddenError("Transaction not found or access denied")

        service = container.receipt_service
        receipt = service.upload(
            user_id, transaction_id, file.filename or "receipt", file.content_type, file.file.read()
        )
        return jsonable_encoder(service.to_info(receipt))

    @app.get("/receipts")
    def list_receipts(
        transaction_id: Optional[str] = Query(default=None, alias="transactionId"),
        limit: int = Query(default=5, ge=1, le=100),
        auth=Depends(current_user)
    ):
        container, user_id = auth
        service = container.receipt_service
        if transaction_id:
            receipts = [service.to_info(r) for r in service.get_by_transaction(user_id, transaction_id)]
        else:
            receipts = service.get_recent(user_id, limit)
        return jsonable_encoder({"receipts": receipts})

    @app.delete("/receipts/{receipt_id}")
    def delete_receipt(receipt_id: str, auth=Depends(current_user)):
        container, user_id = auth
        container.receipt_service.delete(user_id, receipt_id)
        return {"message": "Receipt deleted successfully"}

    @app.get("/storage/{bucket}/{path:path}")
    def download_object(bucket: str, path: str, expires: int = Query(...), token: str = Query(...)):
        store = get_container().object_store
        if not store.verify_signed_url(bucket, path, expires, token):
            raise UnauthorizedError("Invalid or expired link")
        try:
            data = store.download(bucket, path)
        except StorageError:
            raise NotFoundOrForbiddenError("Object not found")
        media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return Response(content=data, media_type=media_type)

    return app
