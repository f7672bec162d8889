"""Shared fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest

from piggybank.models.ledger import Transaction, TransactionCategory, TransactionType


@pytest.fixture
def make_transaction():
    """Build Transactions with unique ids and increasing dates."""
    ids = count(1)
    start = datetime(2024, 6, 1, tzinfo=timezone.utc)

    def _make(
        transaction_type="Expense",
        amount="1",
        category="Other",
        description="Test",
    ) -> Transaction:
        n = next(ids)
        return Transaction(
            id=f"t{n}",
            date=start + timedelta(hours=n),
            type=TransactionType(transaction_type),
            amount=Decimal(amount),
            category=TransactionCategory(category),
            description=description,
        )

    return _make
