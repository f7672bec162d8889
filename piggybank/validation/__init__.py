"""Input validation package."""

from piggybank.validation.validator import (
    ValidationError,
    ensure_affordable,
    is_non_empty_text,
    is_valid_amount,
    parse_amount,
    require_text,
    validate_goal_input,
    validate_transaction_input,
)

__all__ = [
    "ValidationError",
    "ensure_affordable",
    "is_non_empty_text",
    "is_valid_amount",
    "parse_amount",
    "require_text",
    "validate_goal_input",
    "validate_transaction_input",
]
