"""
Tests for Piggy Bank

Test strategy:
1. Unit tests for individual components (models, validators, aggregation)
2. Integration tests for flows (against the in-memory store)
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from piggybank.models.ledger import (
    NewTransaction,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from piggybank.models.goal import Goal, GoalProgress, NewGoal
from piggybank.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)


class TestTransactionModels:
    """Tests for transaction Pydantic models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        transaction = Transaction(
            id="t1",
            type=TransactionType.INCOME,
            amount=Decimal("20.00"),
            category=TransactionCategory.ALLOWANCE,
            description="Weekly allowance",
        )
        assert transaction.id == "t1"
        assert transaction.amount == Decimal("20.00")
        assert transaction.date.tzinfo is not None

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        transaction = NewTransaction(
            type=TransactionType.EXPENSE,
            amount=Decimal("3"),
            category=TransactionCategory.CANDY,
            description="  Lollipop  ",
        )
        assert transaction.description == "Lollipop"

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("NaN")])
    def test_transaction_rejects_non_positive_amount(self, amount):
        """Test that zero, negative and NaN amounts are rejected."""
        with pytest.raises(ValueError):
            NewTransaction(
                type=TransactionType.EXPENSE,
                amount=amount,
                category=TransactionCategory.TOYS,
                description="Test",
            )

    def test_transaction_rejects_blank_description(self):
        with pytest.raises(ValueError):
            NewTransaction(
                type=TransactionType.INCOME,
                amount=Decimal("1"),
                category=TransactionCategory.GIFT,
                description="   ",
            )

    def test_transaction_is_frozen(self):
        """Test that a stored transaction cannot be edited."""
        transaction = Transaction(
            id="t1",
            type=TransactionType.INCOME,
            amount=Decimal("1"),
            category=TransactionCategory.GIFT,
            description="Coin",
        )
        with pytest.raises(ValueError):
            transaction.amount = Decimal("100")

    def test_signed_amount(self):
        date = datetime(2024, 1, 1, tzinfo=timezone.utc)
        income = Transaction(
            id="a", date=date, type=TransactionType.INCOME, amount=Decimal("5"),
            category=TransactionCategory.CHORES, description="Dishes",
        )
        expense = Transaction(
            id="b", date=date, type=TransactionType.EXPENSE, amount=Decimal("2"),
            category=TransactionCategory.CANDY, description="Gum",
        )
        assert income.signed_amount == Decimal("5")
        assert expense.signed_amount == Decimal("-2")


class TestGoalModels:
    """Tests for goal Pydantic models."""

    def test_goal_defaults_to_zero_progress(self):
        goal = Goal(id="g1", name="New Bike", target_amount=Decimal("150"))
        assert goal.current_amount == Decimal("0")
        assert goal.remaining_amount == Decimal("150")

    def test_goal_rejects_progress_above_target(self):
        """Test that current amount can never exceed the target."""
        with pytest.raises(ValueError, match="cannot exceed target"):
            Goal(
                id="g1",
                name="New Bike",
                target_amount=Decimal("100"),
                current_amount=Decimal("100.01"),
            )

    def test_goal_rejects_negative_progress(self):
        with pytest.raises(ValueError):
            Goal(
                id="g1",
                name="New Bike",
                target_amount=Decimal("100"),
                current_amount=Decimal("-1"),
            )

    def test_goal_allows_progress_equal_to_target(self):
        goal = Goal(
            id="g1",
            name="Kite",
            target_amount=Decimal("12"),
            current_amount=Decimal("12"),
        )
        assert goal.remaining_amount == Decimal("0")

    def test_new_goal_requires_positive_target(self):
        with pytest.raises(ValueError):
            NewGoal(name="Kite", target_amount=Decimal("0"))

    def test_goal_progress_bounds(self):
        with pytest.raises(ValueError):
            GoalProgress(goal_id="g1", percentage=Decimal("101"), is_complete=True)


class TestActivityModels:
    """Tests for activity-related Pydantic models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent model creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_ADDED,
            description="Income recorded",
        )
        assert event.event_type == ActivityEventType.TRANSACTION_ADDED
        assert event.severity == ActivitySeverity.INFO

    def test_activity_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = ActivityEvent(
            event_type=ActivityEventType.GOAL_CREATED,
            user_id="demo",
            entity_type="goal",
            entity_id="g1",
            description="Goal created: Kite",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "goal_created"
        assert log_dict["user_id"] == "demo"
        assert log_dict["entity_id"] == "g1"
        assert "timestamp" in log_dict

    def test_builder_transaction_added(self):
        """Test ActivityEventBuilder.transaction_added."""
        event = ActivityEventBuilder.transaction_added(
            user_id="demo",
            transaction_id="t1",
            transaction_type="Income",
            amount=Decimal("20.00"),
        )
        assert event.event_type == ActivityEventType.TRANSACTION_ADDED
        assert event.entity_type == "transaction"
        assert event.details["amount"] == "20.00"

    def test_builder_goal_progress_rejected_is_warning(self):
        event = ActivityEventBuilder.goal_progress_rejected(
            user_id="demo",
            goal_id="g1",
            amount=Decimal("50"),
            balance=Decimal("30"),
        )
        assert event.severity == ActivitySeverity.WARNING
        assert event.details == {"amount": "50", "balance": "30"}

    def test_builder_gateway_error_is_error(self):
        event = ActivityEventBuilder.gateway_error("insert_goal", "quota exceeded")
        assert event.severity == ActivitySeverity.ERROR
        assert event.error_message == "quota exceeded"
        assert event.user_id is None


class TestCategories:
    """Tests for transaction categories."""

    def test_all_categories_exist(self):
        """Test that all expected categories exist."""
        expected = [
            "Allowance", "Chores", "Gift", "Birthday", "Toys",
            "Games", "Books", "Candy", "Savings", "Other",
        ]
        assert [c.value for c in TransactionCategory] == expected

    def test_transaction_types(self):
        assert TransactionType("Income") == TransactionType.INCOME
        assert TransactionType("Expense") == TransactionType.EXPENSE
