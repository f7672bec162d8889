"""
Aggregation Engine

Pure functions over snapshots of transactions and goals. No I/O, no state,
no logging: given the same input they return the same output, so the UI
can call them on every render.

All arithmetic is done in Decimal.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

from pydantic import BaseModel, ConfigDict

from piggybank.models.goal import Goal, GoalProgress
from piggybank.models.ledger import Transaction, TransactionCategory, TransactionType
from piggybank.validation.validator import ValidationError


ZERO = Decimal("0")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, float, str]


class Totals(BaseModel):
    """Income and expense sums of one snapshot."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


def _as_decimal(value: Number, field: str = "amount") -> Decimal:
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(field, "Please enter a valid amount!")
    if not result.is_finite():
        raise ValidationError(field, "Please enter a valid amount!")
    return result


def compute_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Income adds, expense subtracts. An empty ledger has a zero balance."""
    return sum((t.signed_amount for t in transactions), ZERO)


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum income and expense independently."""
    income = ZERO
    expense = ZERO
    for t in transactions:
        if t.type == TransactionType.INCOME:
            income += t.amount
        else:
            expense += t.amount
    return Totals(income=income, expense=expense)


def compute_category_breakdown(
    transactions: Iterable[Transaction],
) -> dict[TransactionCategory, Decimal]:
    """
    Expense totals per category, largest first.

    Income is ignored. Categories with equal totals keep the order in which
    they first appear in the input.
    """
    totals: dict[TransactionCategory, Decimal] = {}
    for t in transactions:
        if t.type != TransactionType.EXPENSE:
            continue
        totals[t.category] = totals.get(t.category, ZERO) + t.amount

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return dict(ordered)


def compute_percentage(part: Number, whole: Number) -> Decimal:
    """
    part as a percentage of whole, kept within [0, 100].

    A zero whole yields 0 instead of dividing by zero.
    """
    part = _as_decimal(part, "part")
    whole = _as_decimal(whole, "whole")
    if whole == 0:
        return ZERO
    percentage = part / whole * HUNDRED
    return max(ZERO, min(percentage, HUNDRED))


def apply_goal_progress(goal: Goal, amount: Number) -> Goal:
    """
    Return a copy of goal with amount added, clamped at the target.

    The balance check is the caller's job (see ensure_affordable); this
    only refuses negative amounts, which would break monotonic progress.
    """
    amount = _as_decimal(amount)
    if amount < 0:
        raise ValidationError("amount", "Progress amount cannot be negative.")

    new_amount = min(goal.current_amount + amount, goal.target_amount)
    return Goal(
        id=goal.id,
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=new_amount,
    )


def compute_goal_progress(goal: Goal) -> GoalProgress:
    """Completion percentage of a goal and whether it is reached."""
    percentage = compute_percentage(goal.current_amount, goal.target_amount)
    return GoalProgress(
        goal_id=goal.id,
        percentage=percentage,
        is_complete=percentage >= HUNDRED,
    )
