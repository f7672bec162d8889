"""
Data Models Package

This package contains all Pydantic models used in Piggy Bank.
All data flowing between the store, the aggregation engine and the UI
must conform to these schemas.
"""

from piggybank.models.ledger import (
    NewTransaction,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from piggybank.models.goal import (
    Goal,
    GoalProgress,
    NewGoal,
)
from piggybank.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "NewTransaction",
    "Transaction",
    "TransactionCategory",
    "TransactionType",
    # Goal models
    "Goal",
    "GoalProgress",
    "NewGoal",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
