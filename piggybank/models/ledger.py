"""
Ledger Models for Piggy Bank

A transaction is a single money movement: money in (Income) or money out
(Expense). Transactions are never edited once recorded - they are only
added or deleted.

DESIGN DECISION: Models are frozen. Every derived value (balance, totals,
breakdowns) is computed from a snapshot of these records by the
aggregation engine, so nothing downstream can mutate a record in place.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a money movement."""
    INCOME = "Income"
    EXPENSE = "Expense"


class TransactionCategory(str, Enum):
    """
    Supported transaction categories.

    The same list is offered for income and expenses; the user picks
    whichever label fits.
    """
    ALLOWANCE = "Allowance"
    CHORES = "Chores"
    GIFT = "Gift"
    BIRTHDAY = "Birthday"
    TOYS = "Toys"
    GAMES = "Games"
    BOOKS = "Books"
    CANDY = "Candy"
    SAVINGS = "Savings"
    OTHER = "Other"


PositiveAmount = Annotated[
    Decimal,
    Field(gt=0, allow_inf_nan=False, description="Amount, always positive"),
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class NewTransaction(BaseModel):
    """
    A transaction the user submitted but the store has not saved yet.

    The store assigns the id; everything else is fixed here.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    date: datetime = Field(
        default_factory=utc_now,
        description="When the transaction happened (UTC)"
    )
    type: TransactionType
    amount: PositiveAmount
    category: TransactionCategory
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was for"
    )


class Transaction(NewTransaction):
    """A persisted transaction."""

    id: str = Field(
        ...,
        min_length=1,
        description="Identifier assigned by the store"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its effect on the balance."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount
