"""
Savings Goal Models for Piggy Bank

A goal is something the user is saving towards: a name, how much it costs,
and how much has been put aside so far.

CRITICAL: 0 <= current_amount <= target_amount always holds.
Progress that would overshoot the target is clamped by the aggregation
engine before a new Goal is built; the model refuses anything else.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from piggybank.models.ledger import PositiveAmount


class NewGoal(BaseModel):
    """A goal the user asked for but the store has not saved yet."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="What the user is saving for"
    )
    target_amount: PositiveAmount


class Goal(NewGoal):
    """A persisted savings goal."""

    id: str = Field(
        ...,
        min_length=1,
        description="Identifier assigned by the store"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        allow_inf_nan=False,
        description="Money put aside so far"
    )

    @model_validator(mode='after')
    def validate_progress_bounds(self) -> 'Goal':
        """Saved money can never exceed the target."""
        if self.current_amount > self.target_amount:
            raise ValueError("Current amount cannot exceed target amount")
        return self

    @property
    def remaining_amount(self) -> Decimal:
        return self.target_amount - self.current_amount


class GoalProgress(BaseModel):
    """Derived completion state of a goal, for display."""
    model_config = ConfigDict(frozen=True)

    goal_id: str
    percentage: Decimal = Field(
        ...,
        ge=0,
        le=100,
        description="Share of the target already saved"
    )
    is_complete: bool
