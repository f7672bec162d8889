"""
Abstract Persistence Gateway

DESIGN DECISION: The UI and the flows only ever talk to this interface.
This allows us to:
1. Run the app as a self-contained demo on an in-memory store
2. Point the same app at a remote store (Google Sheets) by configuration
3. Test the flows without any network access

Every collection is owned by a user: listing and inserting are keyed by
user_id. Deletes and updates target a record id directly.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from piggybank.models.goal import Goal
from piggybank.models.ledger import NewTransaction, Transaction


class PersistenceGateway(ABC):
    """
    Abstract interface for transaction and goal storage.

    Any storage implementation (in-memory, Google Sheets, etc.)
    must implement these methods.
    """

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """
        List a user's transactions.

        Returns:
            Transactions ordered newest date first

        Raises:
            GatewayError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def insert_transaction(
        self,
        user_id: str,
        transaction: NewTransaction,
    ) -> Transaction:
        """
        Save a new transaction.

        Args:
            user_id: Owner of the transaction
            transaction: Validated transaction without an id

        Returns:
            The stored transaction, with its id assigned by the store
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> None:
        """
        Delete a transaction by id.

        Raises:
            NotFoundError: If no such transaction exists
            GatewayError: If the delete fails
        """
        pass

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_goals(self, user_id: str) -> list[Goal]:
        """
        List a user's savings goals.

        Returns:
            Goals in insertion order
        """
        pass

    @abstractmethod
    async def insert_goal(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal,
    ) -> Goal:
        """
        Create a goal. The store starts current_amount at zero.

        Returns:
            The stored goal, with its id assigned by the store
        """
        pass

    @abstractmethod
    async def update_goal_current_amount(
        self,
        goal_id: str,
        new_amount: Decimal,
    ) -> None:
        """
        Overwrite how much has been saved towards a goal.

        Raises:
            NotFoundError: If no such goal exists
        """
        pass

    @abstractmethod
    async def delete_goal(self, goal_id: str) -> None:
        """
        Delete a goal by id.

        Raises:
            NotFoundError: If no such goal exists
        """
        pass


class GatewayError(Exception):
    """Base exception for persistence operations."""
    pass


class NotFoundError(GatewayError):
    """Record not found in the store."""
    pass


class ConnectionError(GatewayError):
    """Could not connect to the storage backend."""
    pass


class NotAuthenticatedError(GatewayError):
    """A write was attempted without a signed-in user."""
    pass
