"""
Activity Models for Piggy Bank

User actions and store failures are described as typed events and written
to the structured local log. They are NOT persisted anywhere - there is no
audit trail, only an operational log for debugging.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Ledger
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_DELETED = "goal_deleted"
    GOAL_PROGRESS_APPLIED = "goal_progress_applied"
    GOAL_PROGRESS_REJECTED = "goal_progress_rejected"

    # Input
    VALIDATION_FAILED = "validation_failed"

    # Snapshots
    SNAPSHOT_FETCHED = "snapshot_fetched"
    SNAPSHOT_DISCARDED = "snapshot_discarded"

    # Session
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"

    # Failures
    RECORD_NOT_FOUND = "record_not_found"
    GATEWAY_ERROR = "gateway_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single logged event."""

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What the event is about
    user_id: Optional[str] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.transaction_added(user_id, transaction_id, ...)
    """

    @staticmethod
    def transaction_added(
        user_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_ADDED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{transaction_type} of {amount} recorded",
            details={"type": transaction_type, "amount": str(amount)},
        )

    @staticmethod
    def transaction_deleted(user_id: str, transaction_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_DELETED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
        )

    @staticmethod
    def goal_created(
        user_id: str,
        goal_id: str,
        name: str,
        target_amount: Decimal,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GOAL_CREATED,
            user_id=user_id,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal created: {name}",
            details={"name": name, "target_amount": str(target_amount)},
        )

    @staticmethod
    def goal_deleted(user_id: str, goal_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GOAL_DELETED,
            user_id=user_id,
            entity_type="goal",
            entity_id=goal_id,
            description="Goal deleted",
        )

    @staticmethod
    def goal_progress_applied(
        user_id: str,
        goal_id: str,
        amount: Decimal,
        new_amount: Decimal,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GOAL_PROGRESS_APPLIED,
            user_id=user_id,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Added {amount} to goal",
            details={"amount": str(amount), "current_amount": str(new_amount)},
        )

    @staticmethod
    def goal_progress_rejected(
        user_id: str,
        goal_id: str,
        amount: Decimal,
        balance: Decimal,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GOAL_PROGRESS_REJECTED,
            severity=ActivitySeverity.WARNING,
            user_id=user_id,
            entity_type="goal",
            entity_id=goal_id,
            description="Progress rejected: not enough balance",
            details={"amount": str(amount), "balance": str(balance)},
        )

    @staticmethod
    def validation_failed(
        field: str,
        message: str,
        user_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.VALIDATION_FAILED,
            severity=ActivitySeverity.WARNING,
            user_id=user_id,
            description=f"Validation failed on {field}",
            details={"field": field},
            error_message=message,
        )

    @staticmethod
    def snapshot_fetched(
        user_id: str,
        token: int,
        transaction_count: int,
        goal_count: int,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_FETCHED,
            severity=ActivitySeverity.DEBUG,
            user_id=user_id,
            description=f"Snapshot {token} fetched",
            details={
                "token": token,
                "transactions": transaction_count,
                "goals": goal_count,
            },
        )

    @staticmethod
    def snapshot_discarded(user_id: Optional[str], token: int, current: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_DISCARDED,
            severity=ActivitySeverity.DEBUG,
            user_id=user_id,
            description=f"Stale snapshot {token} discarded",
            details={"token": token, "installed_token": current},
        )

    @staticmethod
    def user_signed_in(user_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.USER_SIGNED_IN,
            user_id=user_id,
            description="User signed in",
        )

    @staticmethod
    def user_signed_out(user_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.USER_SIGNED_OUT,
            user_id=user_id,
            description="User signed out",
        )

    @staticmethod
    def record_not_found(
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_NOT_FOUND,
            severity=ActivitySeverity.WARNING,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} not found in store",
        )

    @staticmethod
    def gateway_error(
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GATEWAY_ERROR,
            severity=ActivitySeverity.ERROR,
            user_id=user_id,
            description=f"Store operation failed: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
