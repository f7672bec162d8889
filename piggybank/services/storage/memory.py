"""
In-Memory Storage Implementation

Backs the demo mode: no account, no network, a handful of sample records
so the charts have something to show. Also used by the test-suite.

Records live in plain dicts keyed by id. Each stored record is a frozen
model, so replacing a goal's progress means storing a new Goal.
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from piggybank.models.goal import Goal
from piggybank.models.ledger import (
    NewTransaction,
    Transaction,
    TransactionCategory,
    TransactionType,
    utc_now,
)
from piggybank.services.storage.interface import (
    GatewayError,
    NotFoundError,
    PersistenceGateway,
)


# (days ago, type, amount, category, description)
DEMO_TRANSACTIONS = [
    (14, TransactionType.INCOME, "20.00", TransactionCategory.ALLOWANCE, "Weekly allowance"),
    (12, TransactionType.INCOME, "15.00", TransactionCategory.CHORES, "Washed the car"),
    (10, TransactionType.EXPENSE, "4.50", TransactionCategory.CANDY, "Ice cream"),
    (7, TransactionType.INCOME, "20.00", TransactionCategory.ALLOWANCE, "Weekly allowance"),
    (5, TransactionType.EXPENSE, "12.99", TransactionCategory.BOOKS, "Comic book"),
    (3, TransactionType.INCOME, "25.00", TransactionCategory.BIRTHDAY, "Card from grandma"),
    (1, TransactionType.EXPENSE, "8.00", TransactionCategory.TOYS, "Bouncy ball set"),
]

# (name, target, saved so far)
DEMO_GOALS = [
    ("New Bike", "150.00", "30.00"),
    ("Video Game", "60.00", "10.00"),
]


class InMemoryGateway(PersistenceGateway):
    """Dict-backed gateway. Ids are random UUID strings."""

    def __init__(self):
        self._transactions: dict[str, tuple[str, Transaction]] = {}
        self._goals: dict[str, tuple[str, Goal]] = {}

    @classmethod
    def with_demo_data(cls, user_id: str) -> "InMemoryGateway":
        """Create a gateway pre-filled with sample records for user_id."""
        gateway = cls()
        now = utc_now()
        for days_ago, kind, amount, category, description in DEMO_TRANSACTIONS:
            gateway._store_transaction(
                user_id,
                NewTransaction(
                    date=now - timedelta(days=days_ago),
                    type=kind,
                    amount=Decimal(amount),
                    category=category,
                    description=description,
                ),
            )
        for name, target, saved in DEMO_GOALS:
            goal = gateway._store_goal(user_id, name, Decimal(target))
            gateway._goals[goal.id] = (
                user_id,
                Goal(
                    id=goal.id,
                    name=goal.name,
                    target_amount=goal.target_amount,
                    current_amount=Decimal(saved),
                ),
            )
        return gateway

    def _store_transaction(self, user_id: str, transaction: NewTransaction) -> Transaction:
        stored = Transaction(id=str(uuid4()), **transaction.model_dump())
        self._transactions[stored.id] = (user_id, stored)
        return stored

    def _store_goal(self, user_id: str, name: str, target_amount: Decimal) -> Goal:
        goal = Goal(id=str(uuid4()), name=name, target_amount=target_amount)
        self._goals[goal.id] = (user_id, goal)
        return goal

    def _find_goal(self, goal_id: str) -> tuple[str, Goal]:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise NotFoundError(f"Goal not found: {goal_id}")

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """List a user's transactions, newest first."""
        transactions = [t for owner, t in self._transactions.values() if owner == user_id]
        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    async def insert_transaction(
        self,
        user_id: str,
        transaction: NewTransaction,
    ) -> Transaction:
        return self._store_transaction(user_id, transaction)

    async def delete_transaction(self, transaction_id: str) -> None:
        if self._transactions.pop(transaction_id, None) is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

    async def list_goals(self, user_id: str) -> list[Goal]:
        """List a user's goals in the order they were created."""
        return [g for owner, g in self._goals.values() if owner == user_id]

    async def insert_goal(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal,
    ) -> Goal:
        return self._store_goal(user_id, name, target_amount)

    async def update_goal_current_amount(
        self,
        goal_id: str,
        new_amount: Decimal,
    ) -> None:
        owner, goal = self._find_goal(goal_id)
        try:
            updated = Goal(
                id=goal.id,
                name=goal.name,
                target_amount=goal.target_amount,
                current_amount=new_amount,
            )
        except ValueError as e:
            raise GatewayError(f"Failed to update goal: {e}")
        self._goals[goal_id] = (owner, updated)

    async def delete_goal(self, goal_id: str) -> None:
        self._find_goal(goal_id)
        del self._goals[goal_id]
