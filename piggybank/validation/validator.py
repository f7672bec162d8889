"""
Input Validation

Everything the user types goes through here before it reaches the store.

Rules:
- Amounts must parse as a finite number greater than zero
- Names and descriptions must be non-empty after trimming
- Goal progress can only be paid from money the user actually has

IMPORTANT: Validation NEVER silently fixes input (apart from trimming
whitespace). A failure raises ValidationError and nothing is mutated.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from piggybank.models.goal import NewGoal
from piggybank.models.ledger import (
    NewTransaction,
    TransactionCategory,
    TransactionType,
)


AmountInput = Union[str, int, float, Decimal, None]


class ValidationError(Exception):
    """
    User input failed a precondition.

    Carries the offending field and a message that can be shown to the
    user as-is. `title` is the short heading used by the UI.
    """

    def __init__(self, field: str, message: str, title: str = "Oops!"):
        super().__init__(message)
        self.field = field
        self.message = message
        self.title = title


# =============================================================================
# PREDICATES
# =============================================================================

def _to_decimal(raw: AmountInput) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float):
        raw = repr(raw)
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def is_valid_amount(raw: AmountInput) -> bool:
    """True if raw parses as a finite number > 0."""
    value = _to_decimal(raw)
    return value is not None and value > 0


def is_non_empty_text(raw: Optional[str]) -> bool:
    """True if raw has something left after trimming whitespace."""
    return bool(raw and raw.strip())


# =============================================================================
# FIELD VALIDATORS
# =============================================================================

def parse_amount(
    raw: AmountInput,
    field: str = "amount",
    message: str = "Please enter a valid amount greater than 0!",
) -> Decimal:
    """Parse a user-entered amount, raising ValidationError if unusable."""
    value = _to_decimal(raw)
    if value is None or value <= 0:
        raise ValidationError(field, message, title="Oops!")
    return value


def require_text(
    raw: Optional[str],
    field: str,
    message: str,
) -> str:
    """Return raw trimmed, raising ValidationError if nothing is left."""
    if not is_non_empty_text(raw):
        raise ValidationError(field, message, title="Hold on!")
    return raw.strip()


def ensure_affordable(amount: Decimal, balance: Decimal) -> None:
    """
    Reject moving more money into a goal than the balance holds.

    Called by whoever applies goal progress, with the balance computed
    from the current transaction snapshot.
    """
    if amount > balance:
        raise ValidationError(
            "amount",
            "You don't have enough balance to add this amount.",
            title="Not enough money!",
        )


# =============================================================================
# FORM VALIDATORS
# =============================================================================

def validate_transaction_input(
    transaction_type: Union[str, TransactionType],
    amount: AmountInput,
    category: Union[str, TransactionCategory],
    description: Optional[str],
    date: Optional[datetime] = None,
) -> NewTransaction:
    """
    Validate the add-transaction form.

    Checks run in the order the user sees them reported: amount first,
    then description.
    """
    value = parse_amount(amount)
    text = require_text(
        description,
        "description",
        "Please tell us what this is for!",
    )

    try:
        kind = TransactionType(transaction_type)
    except ValueError:
        raise ValidationError("type", f"Unknown transaction type: {transaction_type}")
    try:
        label = TransactionCategory(category)
    except ValueError:
        raise ValidationError("category", f"Unknown category: {category}")

    fields = dict(type=kind, amount=value, category=label, description=text)
    if date is not None:
        fields["date"] = date
    try:
        return NewTransaction(**fields)
    except PydanticValidationError as e:
        error = e.errors()[0]
        raise ValidationError(str(error["loc"][0]), error["msg"])


def validate_goal_input(
    name: Optional[str],
    target_amount: AmountInput,
) -> NewGoal:
    """Validate the create-goal form (target amount first, then name)."""
    value = parse_amount(
        target_amount,
        field="target_amount",
        message="Please enter a valid target amount!",
    )
    text = require_text(name, "name", "Please name your goal!")

    try:
        return NewGoal(name=text, target_amount=value)
    except PydanticValidationError as e:
        error = e.errors()[0]
        raise ValidationError(str(error["loc"][0]), error["msg"])
