"""
Activity Logger

Every user action and every store failure is written to a structured
local log. This gives:
1. Debugging capability when a write goes missing
2. A record of which backend calls failed and why

The log is local only. Nothing here is persisted to the store.
"""

import logging
import sys
from decimal import Decimal
from typing import Optional

import structlog

from piggybank.models.activity import ActivityEvent, ActivityEventBuilder


def configure_logging(log_level: str = "INFO") -> None:
    """Configure stdlib logging and structlog to emit JSON lines."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class ActivityLogger:
    """Central activity logging service."""

    def __init__(self, logger_name: str = "piggybank.activity"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()
        # event_type doubles as the log message
        log_dict.pop("event_type")
        message = event.event_type.value

        if event.severity.value == "error":
            self._logger.error(message, **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning(message, **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug(message, **log_dict)
        else:
            self._logger.info(message, **log_dict)

    def log_transaction_added(
        self,
        user_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
    ) -> None:
        self.log(ActivityEventBuilder.transaction_added(
            user_id=user_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    def log_transaction_deleted(self, user_id: str, transaction_id: str) -> None:
        self.log(ActivityEventBuilder.transaction_deleted(user_id, transaction_id))

    def log_goal_created(
        self,
        user_id: str,
        goal_id: str,
        name: str,
        target_amount: Decimal,
    ) -> None:
        self.log(ActivityEventBuilder.goal_created(
            user_id=user_id,
            goal_id=goal_id,
            name=name,
            target_amount=target_amount,
        ))

    def log_goal_deleted(self, user_id: str, goal_id: str) -> None:
        self.log(ActivityEventBuilder.goal_deleted(user_id, goal_id))

    def log_goal_progress_applied(
        self,
        user_id: str,
        goal_id: str,
        amount: Decimal,
        new_amount: Decimal,
    ) -> None:
        self.log(ActivityEventBuilder.goal_progress_applied(
            user_id=user_id,
            goal_id=goal_id,
            amount=amount,
            new_amount=new_amount,
        ))

    def log_goal_progress_rejected(
        self,
        user_id: str,
        goal_id: str,
        amount: Decimal,
        balance: Decimal,
    ) -> None:
        self.log(ActivityEventBuilder.goal_progress_rejected(
            user_id=user_id,
            goal_id=goal_id,
            amount=amount,
            balance=balance,
        ))

    def log_validation_failed(
        self,
        field: str,
        message: str,
        user_id: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.validation_failed(field, message, user_id))

    def log_snapshot_fetched(
        self,
        user_id: str,
        token: int,
        transaction_count: int,
        goal_count: int,
    ) -> None:
        self.log(ActivityEventBuilder.snapshot_fetched(
            user_id=user_id,
            token=token,
            transaction_count=transaction_count,
            goal_count=goal_count,
        ))

    def log_snapshot_discarded(
        self,
        user_id: Optional[str],
        token: int,
        current: int,
    ) -> None:
        self.log(ActivityEventBuilder.snapshot_discarded(user_id, token, current))

    def log_user_signed_in(self, user_id: str) -> None:
        self.log(ActivityEventBuilder.user_signed_in(user_id))

    def log_user_signed_out(self, user_id: str) -> None:
        self.log(ActivityEventBuilder.user_signed_out(user_id))

    def log_record_not_found(
        self,
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.record_not_found(entity_type, entity_id, user_id))

    def log_gateway_error(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.gateway_error(operation, error_message, user_id))
