"""Chat-driven budget command interpreter."""
from typing import List, Optional

from .intents import (
    AllocateCommand,
    AnalyzeCommand,
    Command,
    CreateCategoryCommand,
    ReceiptsCommand,
    TransferCommand,
    UpdateCategoryCommand,
    ViewBudgetCommand,
    classify,
    parse_date_range,
)
from .models import ActionResult, ChatAction, Message, ERROR, SUCCESS
from .responses import (
    RECEIPTS_UNAVAILABLE,
    WELCOME_MESSAGE,
    default_response,
    illustrative_insights,
)
from finsight.budget.models import OperationResult, format_amount
from finsight.budget.service import FundService
from finsight.ledger.repository import LedgerRepository
from finsight.receipts.models import ReceiptQuery
from finsight.receipts.service import ReceiptService
from finsight.utils.exceptions import FinSightError
from finsight.utils.logger import get_logger

logger = get_logger()


class CommandInterpreter:
    """Turns a chat message into at most one budget operation and runs it."""

    def __init__(
        self,
        fund_service: FundService,
        receipt_service: Optional[ReceiptService] = None,
        ledger: Optional[LedgerRepository] = None
    ):
        self.fund_service = fund_service
        self.receipt_service = receipt_service
        self.ledger = ledger
        self._handlers = {
            AllocateCommand: self._allocate,
            CreateCategoryCommand: self._create_category,
            UpdateCategoryCommand: self._update_category,
            TransferCommand: self._transfer,
            ViewBudgetCommand: self._view,
            AnalyzeCommand: self._analyze,
            ReceiptsCommand: self._receipts,
        }

    def process(self, user_id: str, message: str) -> Optional[ActionResult]:
        """
        Classify and execute a message.

        Args:
            user_id: Owner of the budget
            message: Free text from the user

        Returns:
            ActionResult, or None when no intent matched
        """
        classified = classify(message)
        if classified is None:
            return None

        intent, command = classified
        logger.info(f"Chat intent '{intent}' recognised")
        return self._handlers[type(command)](user_id, intent, command)

    def respond(self, user_id: str, message: str) -> Message:
        """Build the bot reply, falling back to canned responses."""
        result = self.process(user_id, message)
        if result is None:
            return Message(content=default_response(message), sender="bot")
        return Message(
            content=result.response,
            sender="bot",
            action=result.action,
            receipts=result.receipts,
            insights=result.insights
        )

    def _allocate(self, user_id: str, intent: str, command: AllocateCommand) -> ActionResult:
        result = self.fund_service.allocate(user_id, command.category, command.amount)
        return self._from_operation(intent, result)

    def _create_category(self, user_id: str, intent: str, command: CreateCategoryCommand) -> ActionResult:
        result = self.fund_service.create_category(user_id, command.name, command.amount)
        return self._from_operation(intent, result)

    def _update_category(self, user_id: str, intent: str, command: UpdateCategoryCommand) -> ActionResult:
        result = self.fund_service.update_category_amount(user_id, command.category, command.amount)
        return self._from_operation(intent, result)

    def _transfer(self, user_id: str, intent: str, command: TransferCommand) -> ActionResult:
        result = self.fund_service.transfer(
            user_id, command.from_category, command.to_category, command.amount
        )
        return self._from_operation(intent, result)

    def _view(self, user_id: str, intent: str, command: ViewBudgetCommand) -> ActionResult:
        categories = self.fund_service.get_categories(user_id)
        lines = "\n".join(
            f"{c.name}: ${format_amount(c.allocated)} (spent: ${format_amount(c.spent)})"
            for c in categories
        )
        return ActionResult(
            action=ChatAction(type=intent, status=SUCCESS, details={"categories": categories}),
            response=f"Here are your current budget categories:\n\n{lines}"
        )

    def _analyze(self, user_id: str, intent: str, command: AnalyzeCommand) -> ActionResult:
        insights = illustrative_insights()
        return ActionResult(
            action=ChatAction(
                type=intent,
                status=SUCCESS,
                details={"insights": insights, "illustrative": True}
            ),
            response="Here's an analysis of your finances:",
            insights=insights
        )

    def _receipts(self, user_id: str, intent: str, command: ReceiptsCommand) -> ActionResult:
        try:
            if self.receipt_service is None:
                raise FinSightError("Receipt storage is not configured")
            receipts, response = self._find_receipts(user_id, command)
        except Exception as e:
            logger.error(f"Error processing receipt request: {e}")
            return ActionResult(
                action=ChatAction(
                    type=intent,
                    status=ERROR,
                    details={"success": False, "message": f"I couldn't retrieve your receipts: {e}"}
                ),
                response=RECEIPTS_UNAVAILABLE
            )

        return ActionResult(
            action=ChatAction(
                type=intent,
                status=SUCCESS,
                details={
                    "success": True,
                    "message": "Retrieved receipts successfully",
                    "receipts": receipts
                }
            ),
            response=response,
            receipts=receipts
        )

    def _find_receipts(self, user_id: str, command: ReceiptsCommand):
        service = self.receipt_service

        if command.transaction_name:
            transaction_ids: List[str] = []
            if self.ledger is not None:
                transaction_ids = [t.id for t in self.ledger.find_by_name(user_id, command.transaction_name)]
            found = service.query(user_id, ReceiptQuery(transaction_ids=transaction_ids, limit=5))
            receipts = [service.to_info(r) for r in found]
            if not receipts:
                return [], f"I couldn't find any receipts for transaction \"{command.transaction_name}\"."
            return receipts, f"Here are the receipts for transaction \"{command.transaction_name}\":"

        if command.date_text:
            date_range = parse_date_range(command.date_text)
            if date_range is None:
                return [], f"I couldn't understand the date \"{command.date_text}\"."
            start, end = date_range
            found = service.query(user_id, ReceiptQuery(start=start, end=end))
            receipts = [service.to_info(r) for r in found]
            return receipts, f"Here are the receipts from {command.date_text}:"

        if command.count:
            receipts = service.get_recent(user_id, command.count)
            return receipts, f"Here are your {command.count} most recent receipts:"

        return service.get_recent(user_id, 5), "Here are your recent receipts:"

    @staticmethod
    def _from_operation(intent: str, result: OperationResult) -> ActionResult:
        return ActionResult(
            action=ChatAction(
                type=intent,
                status=SUCCESS if result.success else ERROR,
                details=result
            ),
            response=result.message
        )


class ChatSession:
    """Conversation history for one user."""

    def __init__(self, interpreter: CommandInterpreter, user_id: str):
        self.interpreter = interpreter
        self.user_id = user_id
        self.messages: List[Message] = [Message(id="welcome", content=WELCOME_MESSAGE, sender="bot")]

    def send(self, text: str) -> Optional[Message]:
        """Record a user message and the bot reply; blank input is ignored."""
        if not text or not text.strip():
            return None

        self.messages.append(Message(content=text, sender="user"))
        try:
            reply = self.interpreter.respond(self.user_id, text)
        except Exception as e:
            logger.error(f"Error getting assistant response: {e}")
            reply = Message(content="Failed to get response. Please try again.", sender="bot")
        self.messages.append(reply)
        return reply
