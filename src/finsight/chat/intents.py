"""Intent classification for chat messages.

Each intent pairs a name with an extractor that turns a message into a typed
command or None. INTENTS is evaluated in order and the first extractor that
returns a command wins, so the list order is the precedence policy.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple, Union

from dateutil import parser
from dateutil.relativedelta import MO, relativedelta

AMOUNT = r"\$?(\d+(?:\.\d+)?)"

ALLOCATE_PATTERN = re.compile(
    rf"allocate\s+{AMOUNT}\s+(?:to|for|towards)\s+(\w+)", re.IGNORECASE
)
CREATE_CATEGORY_PATTERN = re.compile(
    r"\b(?:create|add|new)\s+(?:a\s+)?(?:new\s+)?category\s+(?:called\s+|named\s+)?"
    rf"[\"']?(.+?)[\"']?(?:\s+with\s+{AMOUNT})?\s*[.!?]?\s*$",
    re.IGNORECASE
)
UPDATE_BUDGET_FOR_PATTERN = re.compile(
    rf"\b(?:set|update|change)\s+(?:the\s+|my\s+)?budget\s+for\s+(\w+)\s+to\s+{AMOUNT}",
    re.IGNORECASE
)
UPDATE_CATEGORY_BUDGET_PATTERN = re.compile(
    r"\b(?!(?:set|update|change|my|the|a|total|overall|entire)\b)(\w+)\s+(?:budget|allocation)\s+to\s+"
    + AMOUNT,
    re.IGNORECASE
)
TRANSFER_PATTERN = re.compile(
    rf"transfer\s+{AMOUNT}\s+from\s+(\w+)\s+to\s+(\w+)", re.IGNORECASE
)
RECEIPT_PHRASE_PATTERN = re.compile(
    r"receipts?\s+(for|from|on)\s+(?:transaction\s+|date\s+)?[\"']?(.+?)[\"']?\s*[.!?]?\s*$",
    re.IGNORECASE
)
RECENT_RECEIPTS_PATTERN = re.compile(r"(?:recent|latest|last)\s+(\d+)?\s*receipt", re.IGNORECASE)

VIEW_KEYWORDS = ("budget", "category", "categories", "funds")
ANALYSIS_KEYWORDS = (
    "spending", "budget", "finance", "financial", "expense", "money", "saving", "transaction", "income",
)
RECEIPT_VERBS = ("show", "view", "get")
DEFAULT_RECEIPT_COUNT = 5


@dataclass(frozen=True)
class AllocateCommand:
    amount: float
    category: str


@dataclass(frozen=True)
class CreateCategoryCommand:
    name: str
    amount: float = 0


@dataclass(frozen=True)
class UpdateCategoryCommand:
    category: str
    amount: float


@dataclass(frozen=True)
class TransferCommand:
    amount: float
    from_category: str
    to_category: str


@dataclass(frozen=True)
class ViewBudgetCommand:
    pass


@dataclass(frozen=True)
class AnalyzeCommand:
    pass


@dataclass(frozen=True)
class ReceiptsCommand:
    transaction_name: Optional[str] = None
    date_text: Optional[str] = None
    count: Optional[int] = None


Command = Union[
    AllocateCommand,
    CreateCategoryCommand,
    UpdateCategoryCommand,
    TransferCommand,
    ViewBudgetCommand,
    AnalyzeCommand,
    ReceiptsCommand,
]


@dataclass(frozen=True)
class Intent:
    """A named extractor in the precedence list."""
    name: str
    extract: Callable[[str], Optional[Command]]


def extract_allocate(message: str) -> Optional[AllocateCommand]:
    match = ALLOCATE_PATTERN.search(message)
    if not match:
        return None
    return AllocateCommand(amount=float(match.group(1)), category=match.group(2))


def extract_create_category(message: str) -> Optional[CreateCategoryCommand]:
    match = CREATE_CATEGORY_PATTERN.search(message.strip())
    if not match:
        return None
    name = match.group(1).strip()
    if not name:
        return None
    amount = float(match.group(2)) if match.group(2) else 0
    return CreateCategoryCommand(name=name, amount=amount)


def extract_update_category(message: str) -> Optional[UpdateCategoryCommand]:
    # "set budget for X to $Y" and "update X budget to $Y" share one command
    for pattern in (UPDATE_BUDGET_FOR_PATTERN, UPDATE_CATEGORY_BUDGET_PATTERN):
        match = pattern.search(message)
        if match:
            return UpdateCategoryCommand(category=match.group(1), amount=float(match.group(2)))
    return None


def extract_transfer(message: str) -> Optional[TransferCommand]:
    match = TRANSFER_PATTERN.search(message)
    if not match:
        return None
    return TransferCommand(
        amount=float(match.group(1)),
        from_category=match.group(2),
        to_category=match.group(3)
    )


def extract_view(message: str) -> Optional[ViewBudgetCommand]:
    lowered = message.lower()
    if "show" in lowered and any(keyword in lowered for keyword in VIEW_KEYWORDS):
        return ViewBudgetCommand()
    return None


def extract_analysis(message: str) -> Optional[AnalyzeCommand]:
    lowered = message.lower()
    if ("analyze" in lowered or "analysis" in lowered) and any(
        keyword in lowered for keyword in ANALYSIS_KEYWORDS
    ):
        return AnalyzeCommand()
    return None


def extract_receipts(message: str) -> Optional[ReceiptsCommand]:
    lowered = message.lower()
    if not (any(verb in lowered for verb in RECEIPT_VERBS) and "receipt" in lowered):
        return None

    phrase_match = RECEIPT_PHRASE_PATTERN.search(message)
    if phrase_match:
        preposition, phrase = phrase_match.group(1).lower(), phrase_match.group(2).strip()
        if preposition == "on" or parse_date_range(phrase) is not None:
            return ReceiptsCommand(date_text=phrase)
        return ReceiptsCommand(transaction_name=phrase)

    recent_match = RECENT_RECEIPTS_PATTERN.search(message)
    if recent_match:
        count = int(recent_match.group(1)) if recent_match.group(1) else DEFAULT_RECEIPT_COUNT
        return ReceiptsCommand(count=count)

    return ReceiptsCommand()


INTENTS: List[Intent] = [
    Intent("allocation", extract_allocate),
    Intent("create_category", extract_create_category),
    Intent("update_category", extract_update_category),
    Intent("transfer", extract_transfer),
    Intent("view", extract_view),
    Intent("analysis", extract_analysis),
    Intent("receipts_view", extract_receipts),
]

INTENT_ORDER = [intent.name for intent in INTENTS]


def classify(message: str) -> Optional[Tuple[str, Command]]:
    """Return (intent name, command) for the first matching intent."""
    for intent in INTENTS:
        command = intent.extract(message)
        if command is not None:
            return intent.name, command
    return None


def parse_date_range(text: str, today: Optional[date] = None) -> Optional[Tuple[datetime, datetime]]:
    """
    Parse a loose date phrase into a [start, end) datetime range.

    Understands today, yesterday, this/last week and this/last month. Other
    phrases containing a digit are handed to dateutil, with missing parts
    (such as the year in "Jan 5th") taken from today. Returns None when the
    phrase is not a date.
    """
    today = today or date.today()
    phrase = " ".join(text.lower().replace(",", " ").split())

    if phrase == "today":
        return _day_range(today)
    if phrase == "yesterday":
        return _day_range(today - timedelta(days=1))
    if phrase in ("this week", "last week"):
        start = today + relativedelta(weekday=MO(-1))
        if phrase == "last week":
            start -= relativedelta(weeks=1)
        return _as_range(start, start + relativedelta(weeks=1))
    if phrase in ("this month", "last month"):
        start = today.replace(day=1)
        if phrase == "last month":
            start -= relativedelta(months=1)
        return _as_range(start, start + relativedelta(months=1))

    # dateutil also reads bare words like "sat" or "march" as dates
    if not any(ch.isdigit() for ch in phrase):
        return None
    try:
        parsed = parser.parse(phrase, default=datetime.combine(today, datetime.min.time()))
    except (ValueError, OverflowError):
        return None
    return _day_range(parsed.date())


def _day_range(day: date) -> Tuple[datetime, datetime]:
    return _as_range(day, day + timedelta(days=1))


def _as_range(start: date, end: date) -> Tuple[datetime, datetime]:
    return datetime.combine(start, datetime.min.time()), datetime.combine(end, datetime.min.time())
