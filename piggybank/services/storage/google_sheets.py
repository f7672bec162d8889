"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the remote store because:
1. Parents can look at the records directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a piggy bank holds a few dozen rows)
- No transactions (each call is one row operation; the sheet decides ordering)
- Limited query capabilities (we filter by user in Python)

The implementation follows the abstract interface, so the rest of the app
does not know which store it is talking to.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from piggybank.config import get_settings
from piggybank.config.settings import GoogleSheetsSettings
from piggybank.models.goal import Goal
from piggybank.models.ledger import (
    NewTransaction,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from piggybank.services.auth import UserDirectory, UserRecord
from piggybank.services.storage.interface import (
    ConnectionError,
    GatewayError,
    NotFoundError,
    PersistenceGateway,
)


logger = structlog.get_logger(__name__)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "date",
    "type",
    "amount",
    "category",
    "description",
    "created_at",
]

# Column mappings for Goals sheet
GOAL_COLUMNS = [
    "id",
    "user_id",
    "name",
    "target_amount",
    "current_amount",
    "created_at",
    "updated_at",
]

# Column mappings for Users sheet
USER_COLUMNS = [
    "user_id",
    "email",
    "password_hash",
    "created_at",
]

GOAL_CURRENT_AMOUNT_COL = GOAL_COLUMNS.index("current_amount") + 1
GOAL_UPDATED_AT_COL = GOAL_COLUMNS.index("updated_at") + 1


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class GoogleSheetsClient:
    """
    Owns the gspread connection and the worksheets.

    Connecting is lazy; worksheets are created on first use. Only the
    network call that opens the spreadsheet is retried: a missing or
    broken credentials file fails at once.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    def connect(self) -> gspread.Client:
        """
        Authorize with the service account (once per client).
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Open the spreadsheet named by GOOGLE_SHEETS_SPREADSHEET_ID."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = self._open_spreadsheet(client)
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
            except gspread.exceptions.APIError as e:
                raise ConnectionError(f"Failed to open spreadsheet: {e}")
        return self._spreadsheet

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        reraise=True,
    )
    def _open_spreadsheet(self, client: gspread.Client) -> gspread.Spreadsheet:
        return client.open_by_key(self._settings.spreadsheet_id)

    def check_connection(self) -> None:
        """
        Open the spreadsheet now instead of on first use.

        Raises:
            ConnectionError: If the credentials or spreadsheet are unusable
        """
        self.get_spreadsheet()

    def _get_or_create_sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # New worksheet: header row first
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
        )

    def get_goals_sheet(self) -> gspread.Worksheet:
        """Get or create the Goals worksheet."""
        return self._get_or_create_sheet(
            self._settings.goals_sheet_name,
            GOAL_COLUMNS,
        )

    def get_users_sheet(self) -> gspread.Worksheet:
        """Get or create the Users worksheet."""
        return self._get_or_create_sheet(
            self._settings.users_sheet_name,
            USER_COLUMNS,
        )


class GoogleSheetsGateway(PersistenceGateway):
    """
    Google Sheets implementation of the persistence gateway.

    Transactions and goals are stored one per row in their own worksheet.
    Every row carries the owning user_id.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    def _transaction_to_row(self, user_id: str, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            transaction.id,
            user_id,
            transaction.date.isoformat(),
            transaction.type.value,
            str(transaction.amount),
            transaction.category.value,
            transaction.description,
            _now_iso(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        return Transaction(
            id=row[0],
            date=datetime.fromisoformat(row[2]),
            type=TransactionType(row[3]),
            amount=Decimal(row[4]),
            category=TransactionCategory(row[5]),
            description=row[6],
        )

    def _goal_to_row(self, user_id: str, goal: Goal) -> list:
        """Convert a Goal to a spreadsheet row."""
        now = _now_iso()
        return [
            goal.id,
            user_id,
            goal.name,
            str(goal.target_amount),
            str(goal.current_amount),
            now,
            now,
        ]

    def _row_to_goal(self, row: list) -> Goal:
        """Convert a spreadsheet row to a Goal."""
        return Goal(
            id=row[0],
            name=row[2],
            target_amount=Decimal(row[3]),
            current_amount=Decimal(row[4] or "0"),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append_row_once(self, sheet: gspread.Worksheet, row: list) -> None:
        """
        Append row, retrying on failure.

        The id in row[0] is fixed before the first attempt. A failed call may
        still have written the row, so each attempt first looks for that id
        and skips the append if it is already there.
        """
        if row[0] in sheet.col_values(1):
            return
        sheet.append_row(row, value_input_option="RAW")

    def _find_row(self, sheet: gspread.Worksheet, record_id: str) -> tuple[int, list]:
        """Return (1-based sheet row index, row values) for record_id."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == record_id:
                return idx, row
        raise NotFoundError(f"Record not found: {record_id}")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """List a user's transactions, newest first."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to list transactions: {e}")

        transactions = []
        for row in all_rows:
            if len(row) < 7 or not row[0] or row[1] != user_id:
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except (ValueError, InvalidOperation) as e:
                logger.warning("malformed_transaction_row", row_id=row[0], error=str(e))

        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    async def insert_transaction(
        self,
        user_id: str,
        transaction: NewTransaction,
    ) -> Transaction:
        """Append a transaction row with a fresh id."""
        stored = Transaction(id=str(uuid4()), **transaction.model_dump())
        try:
            sheet = self._client.get_transactions_sheet()
            self._append_row_once(sheet, self._transaction_to_row(user_id, stored))
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to save transaction: {e}")
        return stored

    async def delete_transaction(self, transaction_id: str) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            idx, _ = self._find_row(sheet, transaction_id)
            sheet.delete_rows(idx)
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to delete transaction: {e}")

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self, user_id: str) -> list[Goal]:
        """List a user's goals in sheet (insertion) order."""
        try:
            sheet = self._client.get_goals_sheet()
            all_rows = sheet.get_all_values()[1:]
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to list goals: {e}")

        goals = []
        for row in all_rows:
            if len(row) < 5 or not row[0] or row[1] != user_id:
                continue
            try:
                goals.append(self._row_to_goal(row))
            except (ValueError, InvalidOperation) as e:
                logger.warning("malformed_goal_row", row_id=row[0], error=str(e))
        return goals

    async def insert_goal(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal,
    ) -> Goal:
        """Append a goal row; progress starts at zero."""
        goal = Goal(id=str(uuid4()), name=name, target_amount=target_amount)
        try:
            sheet = self._client.get_goals_sheet()
            self._append_row_once(sheet, self._goal_to_row(user_id, goal))
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to save goal: {e}")
        return goal

    async def update_goal_current_amount(
        self,
        goal_id: str,
        new_amount: Decimal,
    ) -> None:
        try:
            sheet = self._client.get_goals_sheet()
            idx, row = self._find_row(sheet, goal_id)
            if new_amount < 0 or new_amount > Decimal(row[3]):
                raise GatewayError(
                    f"Goal amount {new_amount} is outside 0..{row[3]}"
                )
            sheet.update_cell(idx, GOAL_CURRENT_AMOUNT_COL, str(new_amount))
            sheet.update_cell(idx, GOAL_UPDATED_AT_COL, _now_iso())
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to update goal: {e}")

    async def delete_goal(self, goal_id: str) -> None:
        try:
            sheet = self._client.get_goals_sheet()
            idx, _ = self._find_row(sheet, goal_id)
            sheet.delete_rows(idx)
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to delete goal: {e}")


class GoogleSheetsUserDirectory(UserDirectory):
    """Accounts stored one per row in the Users worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def find_user(self, email: str) -> Optional[UserRecord]:
        try:
            rows = self._client.get_users_sheet().get_all_values()[1:]
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to read users: {e}")

        for row in rows:
            if len(row) >= 3 and row[1] == email:
                return UserRecord(user_id=row[0], email=row[1], password_hash=row[2])
        return None

    def add_user(self, record: UserRecord) -> None:
        try:
            sheet = self._client.get_users_sheet()
            sheet.append_row(
                [record.user_id, record.email, record.password_hash, _now_iso()],
                value_input_option="RAW",
            )
        except GatewayError:
            raise
        except Exception as e:
            raise GatewayError(f"Failed to save user: {e}")
