"""Chat assistant for budget operations."""
from .models import ActionResult, ChatAction, FinancialInsight, Message
from .intents import INTENTS, INTENT_ORDER, classify
from .interpreter import ChatSession, CommandInterpreter

__all__ = [
    "ActionResult",
    "ChatAction",
    "FinancialInsight",
    "Message",
    "INTENTS",
    "INTENT_ORDER",
    "classify",
    "ChatSession",
    "CommandInterpreter",
]
