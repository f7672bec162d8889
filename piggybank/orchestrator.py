"""
Main Orchestrator for Piggy Bank

This module ties together the store, the validators and the aggregation
engine, and defines the flows the UI calls:
1. Ledger (add / delete / list transactions)
2. Goals (create / delete / list goals, apply progress)
3. Dashboard (fetch a fresh snapshot of both collections)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing validation
- Goal progress is only paid from the current balance
- No signed-in user means empty collections and refused writes
- Every action and failure is logged

Errors are logged here and re-raised for the UI to show.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from piggybank.activity import ActivityLogger, configure_logging
from piggybank.aggregation import apply_goal_progress, compute_balance
from piggybank.config import AppSettings, get_settings
from piggybank.models.goal import Goal
from piggybank.models.ledger import (
    Transaction,
    TransactionCategory,
    TransactionType,
)
from piggybank.services.auth import (
    DEMO_USER_ID,
    AuthProvider,
    DemoAuthProvider,
    Identity,
    InMemoryUserDirectory,
    SessionAuthProvider,
    UserDirectory,
)
from piggybank.services.storage import (
    GatewayError,
    GoogleSheetsClient,
    GoogleSheetsGateway,
    GoogleSheetsUserDirectory,
    InMemoryGateway,
    NotAuthenticatedError,
    NotFoundError,
    PersistenceGateway,
)
from piggybank.validation import (
    ValidationError,
    ensure_affordable,
    parse_amount,
    validate_goal_input,
    validate_transaction_input,
)


def _require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise NotAuthenticatedError("Please sign in first")
    return identity


class LedgerFlow:
    """
    Orchestrates transaction operations.

    Transactions are only ever added or deleted, never edited.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._gateway = gateway
        self._activity = activity_logger or ActivityLogger()

    async def list_transactions(self, identity: Optional[Identity]) -> list[Transaction]:
        """A user's transactions, newest first. Empty when signed out."""
        if identity is None:
            return []
        try:
            return await self._gateway.list_transactions(identity.user_id)
        except GatewayError as e:
            self._activity.log_gateway_error("list_transactions", str(e), identity.user_id)
            raise

    async def add_transaction(
        self,
        identity: Optional[Identity],
        transaction_type: Union[str, TransactionType],
        amount: Union[str, Decimal, float, int],
        category: Union[str, TransactionCategory],
        description: str,
    ) -> Transaction:
        """
        Validate and save a transaction.

        Raises:
            ValidationError: If the form input is unusable
            NotAuthenticatedError: If nobody is signed in
            GatewayError: If the store write fails
        """
        identity = _require_identity(identity)

        try:
            new_transaction = validate_transaction_input(
                transaction_type=transaction_type,
                amount=amount,
                category=category,
                description=description,
            )
        except ValidationError as e:
            self._activity.log_validation_failed(e.field, e.message, identity.user_id)
            raise

        try:
            stored = await self._gateway.insert_transaction(identity.user_id, new_transaction)
        except GatewayError as e:
            self._activity.log_gateway_error("insert_transaction", str(e), identity.user_id)
            raise

        self._activity.log_transaction_added(
            user_id=identity.user_id,
            transaction_id=stored.id,
            transaction_type=stored.type.value,
            amount=stored.amount,
        )
        return stored

    async def delete_transaction(
        self,
        identity: Optional[Identity],
        transaction_id: str,
    ) -> None:
        """
        Delete a transaction.

        Raises:
            NotFoundError: If it was already gone (e.g. deleted elsewhere)
        """
        identity = _require_identity(identity)
        try:
            await self._gateway.delete_transaction(transaction_id)
        except NotFoundError:
            self._activity.log_record_not_found("transaction", transaction_id, identity.user_id)
            raise
        except GatewayError as e:
            self._activity.log_gateway_error("delete_transaction", str(e), identity.user_id)
            raise

        self._activity.log_transaction_deleted(identity.user_id, transaction_id)


class GoalFlow:
    """
    Orchestrates savings goal operations.

    Progress is paid from the balance: the caller passes the transaction
    snapshot the user is looking at, and the amount is checked against
    the balance computed from it before anything is written.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._gateway = gateway
        self._activity = activity_logger or ActivityLogger()

    async def list_goals(self, identity: Optional[Identity]) -> list[Goal]:
        """A user's goals in creation order. Empty when signed out."""
        if identity is None:
            return []
        try:
            return await self._gateway.list_goals(identity.user_id)
        except GatewayError as e:
            self._activity.log_gateway_error("list_goals", str(e), identity.user_id)
            raise

    async def create_goal(
        self,
        identity: Optional[Identity],
        name: str,
        target_amount: Union[str, Decimal, float, int],
    ) -> Goal:
        """Validate and save a goal. Progress starts at zero."""
        identity = _require_identity(identity)

        try:
            new_goal = validate_goal_input(name, target_amount)
        except ValidationError as e:
            self._activity.log_validation_failed(e.field, e.message, identity.user_id)
            raise

        try:
            goal = await self._gateway.insert_goal(
                identity.user_id,
                new_goal.name,
                new_goal.target_amount,
            )
        except GatewayError as e:
            self._activity.log_gateway_error("insert_goal", str(e), identity.user_id)
            raise

        self._activity.log_goal_created(
            user_id=identity.user_id,
            goal_id=goal.id,
            name=goal.name,
            target_amount=goal.target_amount,
        )
        return goal

    async def apply_progress(
        self,
        identity: Optional[Identity],
        goal: Goal,
        amount: Union[str, Decimal, float, int],
        transactions: list[Transaction],
    ) -> Goal:
        """
        Move money into a goal.

        Returns:
            The goal with its new (clamped) current amount

        Raises:
            ValidationError: If amount is invalid or exceeds the balance.
                The goal is left unchanged.
            NotFoundError: If the goal was deleted elsewhere
        """
        identity = _require_identity(identity)

        try:
            value = parse_amount(amount)
        except ValidationError as e:
            self._activity.log_validation_failed(e.field, e.message, identity.user_id)
            raise

        balance = compute_balance(transactions)
        try:
            ensure_affordable(value, balance)
        except ValidationError:
            self._activity.log_goal_progress_rejected(
                user_id=identity.user_id,
                goal_id=goal.id,
                amount=value,
                balance=balance,
            )
            raise

        updated = apply_goal_progress(goal, value)
        try:
            await self._gateway.update_goal_current_amount(goal.id, updated.current_amount)
        except NotFoundError:
            self._activity.log_record_not_found("goal", goal.id, identity.user_id)
            raise
        except GatewayError as e:
            self._activity.log_gateway_error("update_goal_current_amount", str(e), identity.user_id)
            raise

        self._activity.log_goal_progress_applied(
            user_id=identity.user_id,
            goal_id=goal.id,
            amount=value,
            new_amount=updated.current_amount,
        )
        return updated

    async def delete_goal(self, identity: Optional[Identity], goal_id: str) -> None:
        identity = _require_identity(identity)
        try:
            await self._gateway.delete_goal(goal_id)
        except NotFoundError:
            self._activity.log_record_not_found("goal", goal_id, identity.user_id)
            raise
        except GatewayError as e:
            self._activity.log_gateway_error("delete_goal", str(e), identity.user_id)
            raise

        self._activity.log_goal_deleted(identity.user_id, goal_id)


# =============================================================================
# SNAPSHOTS
# =============================================================================

class Snapshot(BaseModel):
    """Both collections as fetched together for one user."""
    model_config = ConfigDict(frozen=True)

    token: int
    user_id: Optional[str] = None
    transactions: tuple[Transaction, ...] = ()
    goals: tuple[Goal, ...] = ()


class SnapshotStore:
    """
    Holds the snapshot currently on screen for one UI session.

    Each fetch takes a token from begin_fetch(). A result is installed only
    if no newer fetch has been started since; otherwise it is dropped.
    Installed snapshots replace the previous one wholesale.
    """

    def __init__(self):
        self._latest_token = 0
        self._current = Snapshot(token=0)

    @property
    def current(self) -> Snapshot:
        return self._current

    def begin_fetch(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def is_stale(self, token: int) -> bool:
        return token < self._latest_token

    def install(self, snapshot: Snapshot) -> bool:
        """Install snapshot unless a newer fetch superseded it."""
        if self.is_stale(snapshot.token):
            return False
        self._current = snapshot
        return True


class DashboardFlow:
    """Fetches both collections and installs them as one snapshot."""

    def __init__(
        self,
        ledger_flow: LedgerFlow,
        goal_flow: GoalFlow,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._ledger_flow = ledger_flow
        self._goal_flow = goal_flow
        self._activity = activity_logger or ActivityLogger()

    async def refresh(
        self,
        identity: Optional[Identity],
        store: SnapshotStore,
    ) -> Snapshot:
        """
        Refetch transactions and goals into store.

        Returns:
            Whatever snapshot is installed afterwards. If this fetch was
            superseded, that is the newer one, not this result.
        """
        token = store.begin_fetch()
        transactions = await self._ledger_flow.list_transactions(identity)
        goals = await self._goal_flow.list_goals(identity)

        snapshot = Snapshot(
            token=token,
            user_id=identity.user_id if identity else None,
            transactions=tuple(transactions),
            goals=tuple(goals),
        )
        user_id = snapshot.user_id
        if store.install(snapshot):
            if user_id:
                self._activity.log_snapshot_fetched(
                    user_id=user_id,
                    token=token,
                    transaction_count=len(transactions),
                    goal_count=len(goals),
                )
        else:
            self._activity.log_snapshot_discarded(user_id, token, store.current.token)
        return store.current


# =============================================================================
# WIRING
# =============================================================================

@dataclass
class StorageChoice:
    gateway: PersistenceGateway
    user_directory: UserDirectory
    backend: str
    # Why the configured remote store was not used, if it wasn't
    fallback_reason: Optional[str] = None


@dataclass
class AppComponents:
    ledger_flow: LedgerFlow
    goal_flow: GoalFlow
    dashboard_flow: DashboardFlow
    activity_logger: ActivityLogger
    user_directory: UserDirectory
    backend: str
    storage_error: Optional[str] = None


def _memory_storage(app_settings: AppSettings) -> tuple[InMemoryGateway, InMemoryUserDirectory]:
    if app_settings.seed_demo_data:
        gateway = InMemoryGateway.with_demo_data(DEMO_USER_ID)
    else:
        gateway = InMemoryGateway()
    return gateway, InMemoryUserDirectory()


def create_gateway(
    app_settings: AppSettings,
    activity_logger: ActivityLogger,
) -> StorageChoice:
    """
    Build the configured store.

    Google Sheets is opened here rather than on first use, so bad settings,
    a missing credentials file or an unknown spreadsheet are caught at
    startup. Any of those falls back to the in-memory store, with the
    reason kept for the UI.
    """
    fallback_reason = None
    if app_settings.storage_backend == "google_sheets":
        try:
            client = GoogleSheetsClient()
            client.check_connection()
        except Exception as e:
            fallback_reason = str(e)
            activity_logger.log_gateway_error("configure_google_sheets", fallback_reason)
        else:
            return StorageChoice(
                gateway=GoogleSheetsGateway(client),
                user_directory=GoogleSheetsUserDirectory(client),
                backend="google_sheets",
            )

    gateway, user_directory = _memory_storage(app_settings)
    return StorageChoice(
        gateway=gateway,
        user_directory=user_directory,
        backend="memory",
        fallback_reason=fallback_reason,
    )


def create_auth_provider(backend: str, user_directory: UserDirectory) -> AuthProvider:
    """Demo identity for the in-memory store, accounts otherwise."""
    if backend == "memory":
        return DemoAuthProvider()
    return SessionAuthProvider(user_directory)


def create_app_components(
    gateway: Optional[PersistenceGateway] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        gateway: Use this store instead of the configured one (tests).
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)
    activity_logger = ActivityLogger()

    if gateway is None:
        storage = create_gateway(app_settings, activity_logger)
    else:
        backend = "memory" if isinstance(gateway, InMemoryGateway) else "custom"
        storage = StorageChoice(gateway, InMemoryUserDirectory(), backend)

    ledger_flow = LedgerFlow(storage.gateway, activity_logger)
    goal_flow = GoalFlow(storage.gateway, activity_logger)
    dashboard_flow = DashboardFlow(ledger_flow, goal_flow, activity_logger)

    return AppComponents(
        ledger_flow=ledger_flow,
        goal_flow=goal_flow,
        dashboard_flow=dashboard_flow,
        activity_logger=activity_logger,
        user_directory=storage.user_directory,
        backend=storage.backend,
        storage_error=storage.fallback_reason,
    )
