"""Canned assistant texts."""
import random
from typing import List

from .models import FinancialInsight

WELCOME_MESSAGE = (
    "Hello! I'm your AI financial assistant. I can help you manage your finances and "
    "allocate funds to different categories. Try asking me to allocate money to bills, "
    "savings, or spending."
)

HELP_MESSAGE = (
    "I can help you allocate your funds to different categories. Try saying "
    "'Allocate $500 to bills', 'Transfer $200 from entertainment to savings', or "
    "'Show my budget categories'."
)

# Checked in order; the first keyword found in the message wins
KEYWORD_RESPONSES = [
    ("budget", "I can help you manage your budget. You can ask me to allocate funds to different "
               "categories like 'Allocate $500 to bills' or 'Transfer $200 from entertainment to savings'."),
    ("invest", "For investment advice, I recommend diversifying your portfolio. Would you like me to "
               "allocate some funds to your investment category?"),
    ("save", "To improve your savings, try allocating more funds there. Try saying 'Allocate $300 to "
             "savings' or 'Transfer $100 from entertainment to savings'."),
    ("debt", "To tackle debt, allocate more funds to paying it off. Try saying 'Allocate $400 to bills' "
             "to set aside money for debt payments."),
]

RECEIPTS_UNAVAILABLE = "I couldn't retrieve your receipts at this time. Please try again later."

FINANCIAL_TIPS = [
    "Consider setting aside 20% of your income for savings and investments.",
    "Create an emergency fund that covers 3-6 months of expenses.",
    "Pay off high-interest debt first to save money in the long run.",
    "Review your subscription services monthly to eliminate unused ones.",
    "Try the 50/30/20 rule: 50% for needs, 30% for wants, and 20% for savings.",
    "Check your credit score regularly and work on improving it.",
    "Consider automating your savings to make it easier to stick to your budget.",
    "Track your spending for a month to identify areas where you can cut back.",
    "Avoid lifestyle inflation when you get a raise or bonus.",
    "Set specific financial goals with deadlines to stay motivated.",
]


def default_response(message: str) -> str:
    """Keyword-matched reply for messages no intent recognised."""
    lowered = message.lower()
    for keyword, response in KEYWORD_RESPONSES:
        if keyword in lowered:
            return response
    return HELP_MESSAGE


def random_tip() -> str:
    return random.choice(FINANCIAL_TIPS)


def illustrative_insights() -> List[FinancialInsight]:
    """Fixed example insights; these are not derived from the user's data."""
    return [
        FinancialInsight(
            type="saving",
            title="Savings on track",
            description="You've saved 15% more this month than last month.",
            impact="positive",
            value=15,
        ),
        FinancialInsight(
            type="spending",
            title="Dining out is up",
            description="Restaurant spending is 22% above your monthly average.",
            impact="negative",
            value=22,
            category="Food",
        ),
        FinancialInsight(
            type="budget",
            title="Entertainment over budget",
            description="You've spent $410 of your $400 entertainment budget.",
            impact="negative",
            value=410,
            category="Entertainment",
        ),
        FinancialInsight(
            type="suggestion",
            title="Move surplus to savings",
            description="Transfer $50 from Transportation to Savings to reach your goal sooner.",
            impact="neutral",
            value=50,
            category="Savings",
        ),
    ]
