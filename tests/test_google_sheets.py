"""
Tests for the Google Sheets gateway.

The gspread client is replaced with mocks; no network calls are made.
"""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock

import gspread

from piggybank.config.settings import GoogleSheetsSettings
from piggybank.models.ledger import NewTransaction, TransactionCategory, TransactionType
from piggybank.services.auth import UserRecord
from piggybank.services.storage import (
    ConnectionError,
    GatewayError,
    GoogleSheetsClient,
    GoogleSheetsGateway,
    GoogleSheetsUserDirectory,
    NotFoundError,
)
from piggybank.services.storage.google_sheets import (
    GOAL_COLUMNS,
    GOAL_CURRENT_AMOUNT_COL,
    TRANSACTION_COLUMNS,
    USER_COLUMNS,
)


def _transaction_row(record_id, user_id, date, amount="5.00", kind="Income"):
    return [
        record_id, user_id, date, kind, amount, "Gift", "From grandma",
        "2024-06-01T00:00:00+00:00",
    ]


def _goal_row(record_id, user_id, name="Kite", target="12.00", current="2.00"):
    now = "2024-06-01T00:00:00+00:00"
    return [record_id, user_id, name, target, current, now, now]


@pytest.fixture
def transactions_sheet():
    sheet = MagicMock()
    sheet.get_all_values.return_value = [
        TRANSACTION_COLUMNS,
        _transaction_row("t1", "alice", "2024-06-01T10:00:00+00:00"),
        _transaction_row("t2", "bob", "2024-06-02T10:00:00+00:00"),
        _transaction_row("t3", "alice", "2024-06-03T10:00:00+00:00", "2.50", "Expense"),
    ]
    sheet.col_values.return_value = ["id", "t1", "t2", "t3"]
    return sheet


@pytest.fixture
def goals_sheet():
    sheet = MagicMock()
    sheet.get_all_values.return_value = [
        GOAL_COLUMNS,
        _goal_row("g1", "alice", "Kite"),
        _goal_row("g2", "bob", "Bike"),
        _goal_row("g3", "alice", "Book", "20.00", ""),
    ]
    sheet.col_values.return_value = ["id", "g1", "g2", "g3"]
    return sheet


@pytest.fixture
def gateway(transactions_sheet, goals_sheet):
    client = MagicMock()
    client.get_transactions_sheet.return_value = transactions_sheet
    client.get_goals_sheet.return_value = goals_sheet
    return GoogleSheetsGateway(client)


class TestTransactions:

    @pytest.mark.asyncio
    async def test_list_filters_by_user_newest_first(self, gateway):
        transactions = await gateway.list_transactions("alice")
        assert [t.id for t in transactions] == ["t3", "t1"]
        assert transactions[0].type == TransactionType.EXPENSE
        assert transactions[0].amount == Decimal("2.50")

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self, gateway, transactions_sheet):
        transactions_sheet.get_all_values.return_value.append(
            _transaction_row("t4", "alice", "2024-06-04T10:00:00+00:00", "lots")
        )
        transactions = await gateway.list_transactions("alice")
        assert [t.id for t in transactions] == ["t3", "t1"]

    @pytest.mark.asyncio
    async def test_insert_appends_row(self, gateway, transactions_sheet):
        stored = await gateway.insert_transaction(
            "alice",
            NewTransaction(
                type=TransactionType.EXPENSE,
                amount=Decimal("3.25"),
                category=TransactionCategory.CANDY,
                description="Gum",
            ),
        )

        transactions_sheet.append_row.assert_called_once()
        row = transactions_sheet.append_row.call_args.args[0]
        assert row[0] == stored.id
        assert row[1] == "alice"
        assert row[3:7] == ["Expense", "3.25", "Candy", "Gum"]
        transactions_sheet.col_values.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_delete_removes_matching_row(self, gateway, transactions_sheet):
        await gateway.delete_transaction("t3")
        transactions_sheet.delete_rows.assert_called_once_with(4)

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, gateway, transactions_sheet):
        with pytest.raises(NotFoundError):
            await gateway.delete_transaction("missing")
        transactions_sheet.delete_rows.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_failure_is_wrapped(self, gateway, transactions_sheet):
        transactions_sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(GatewayError, match="quota exceeded"):
            await gateway.list_transactions("alice")


class TestGoals:

    @pytest.mark.asyncio
    async def test_list_filters_by_user_in_sheet_order(self, gateway):
        goals = await gateway.list_goals("alice")
        assert [g.name for g in goals] == ["Kite", "Book"]
        assert goals[0].current_amount == Decimal("2.00")
        assert goals[1].current_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_insert_appends_row(self, gateway, goals_sheet):
        goal = await gateway.insert_goal("alice", "Skates", Decimal("40"))
        row = goals_sheet.append_row.call_args.args[0]
        assert row[:5] == [goal.id, "alice", "Skates", "40", "0"]

    @pytest.mark.asyncio
    async def test_api_failure_is_wrapped(self, gateway, goals_sheet):
        goals_sheet.append_row.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(GatewayError, match="quota exceeded"):
            await gateway.insert_goal("alice", "Skates", Decimal("40"))

    @pytest.mark.asyncio
    async def test_update_writes_current_amount(self, gateway, goals_sheet):
        await gateway.update_goal_current_amount("g1", Decimal("7.00"))
        goals_sheet.update_cell.assert_any_call(2, GOAL_CURRENT_AMOUNT_COL, "7.00")

    @pytest.mark.asyncio
    async def test_update_beyond_target_fails(self, gateway, goals_sheet):
        with pytest.raises(GatewayError):
            await gateway.update_goal_current_amount("g1", Decimal("12.01"))
        goals_sheet.update_cell.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, gateway):
        with pytest.raises(NotFoundError):
            await gateway.update_goal_current_amount("missing", Decimal("1"))

    @pytest.mark.asyncio
    async def test_delete(self, gateway, goals_sheet):
        await gateway.delete_goal("g3")
        goals_sheet.delete_rows.assert_called_once_with(4)


class TestClient:

    def _client(self, tmp_path):
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}")
        settings = GoogleSheetsSettings(
            credentials_path=str(credentials),
            spreadsheet_id="sheet-id",
        )
        return GoogleSheetsClient(settings)

    def test_missing_worksheet_is_created_with_headers(self, tmp_path):
        client = self._client(tmp_path)
        spreadsheet = MagicMock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("Goals")
        client._spreadsheet = spreadsheet

        sheet = client.get_goals_sheet()

        spreadsheet.add_worksheet.assert_called_once_with(
            title="Goals", rows=1000, cols=len(GOAL_COLUMNS),
        )
        assert sheet is spreadsheet.add_worksheet.return_value
        sheet.append_row.assert_called_once_with(GOAL_COLUMNS)

    def test_existing_worksheet_is_reused(self, tmp_path):
        client = self._client(tmp_path)
        spreadsheet = MagicMock()
        client._spreadsheet = spreadsheet

        sheet = client.get_transactions_sheet()

        spreadsheet.worksheet.assert_called_once_with("Transactions")
        assert sheet is spreadsheet.worksheet.return_value
        spreadsheet.add_worksheet.assert_not_called()

    def test_missing_credentials_file_fails_on_connect(self, tmp_path):
        """A credentials file removed after startup surfaces as ConnectionError."""
        client = self._client(tmp_path)
        (tmp_path / "credentials.json").unlink()

        with pytest.raises(ConnectionError, match="not found"):
            client.check_connection()

    def test_unusable_credentials_fail_on_check(self, tmp_path):
        """The '{}' file is not a service account key; nothing is opened."""
        client = self._client(tmp_path)
        with pytest.raises(ConnectionError):
            client.check_connection()
        assert client._spreadsheet is None

    def test_unknown_spreadsheet_raises_connection_error(self, tmp_path):
        client = self._client(tmp_path)
        gspread_client = MagicMock()
        gspread_client.open_by_key.side_effect = gspread.SpreadsheetNotFound("sheet-id")
        client._client = gspread_client

        with pytest.raises(ConnectionError, match="Spreadsheet not found"):
            client.check_connection()
        gspread_client.open_by_key.assert_called_once_with("sheet-id")

    def test_check_connection_opens_spreadsheet(self, tmp_path):
        client = self._client(tmp_path)
        gspread_client = MagicMock()
        client._client = gspread_client

        client.check_connection()

        assert client._spreadsheet is gspread_client.open_by_key.return_value


class TestAppendRowOnce:
    """Retried appends must not write a record twice."""

    def test_appends_new_id(self, gateway):
        sheet = MagicMock()
        sheet.col_values.return_value = ["id", "t1"]
        gateway._append_row_once(sheet, ["t2", "alice"])
        sheet.append_row.assert_called_once_with(["t2", "alice"], value_input_option="RAW")

    def test_skips_id_already_written(self, gateway):
        """An earlier attempt that timed out after writing leaves the row in place."""
        sheet = MagicMock()
        sheet.col_values.return_value = ["id", "t1", "t2"]
        gateway._append_row_once(sheet, ["t2", "alice"])
        sheet.append_row.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert_reuses_id_across_attempts(self, gateway, transactions_sheet, monkeypatch):
        """The id is fixed before the first attempt and reused by the retry."""
        attempts = []

        def flaky_append(row, value_input_option):
            attempts.append(row[0])
            if len(attempts) == 1:
                raise RuntimeError("timeout")

        transactions_sheet.append_row.side_effect = flaky_append
        monkeypatch.setattr(
            GoogleSheetsGateway._append_row_once.retry, "sleep", lambda seconds: None
        )

        stored = await gateway.insert_transaction(
            "alice",
            NewTransaction(
                type=TransactionType.INCOME,
                amount=Decimal("1"),
                category=TransactionCategory.GIFT,
                description="Coin",
            ),
        )

        assert attempts == [stored.id, stored.id]


class TestUserDirectory:

    @pytest.fixture
    def users_sheet(self):
        sheet = MagicMock()
        sheet.get_all_values.return_value = [
            USER_COLUMNS,
            ["u1", "kid@example.com", "$2b$04$hash", "2024-06-01T00:00:00+00:00"],
        ]
        return sheet

    @pytest.fixture
    def directory(self, users_sheet):
        client = MagicMock()
        client.get_users_sheet.return_value = users_sheet
        return GoogleSheetsUserDirectory(client)

    def test_find_existing_user(self, directory):
        record = directory.find_user("kid@example.com")
        assert record.user_id == "u1"
        assert record.password_hash == "$2b$04$hash"

    def test_find_unknown_user(self, directory):
        assert directory.find_user("other@example.com") is None

    def test_add_user_appends_row(self, directory, users_sheet):
        directory.add_user(UserRecord(
            user_id="u2", email="new@example.com", password_hash="$2b$04$x",
        ))
        row = users_sheet.append_row.call_args.args[0]
        assert row[:3] == ["u2", "new@example.com", "$2b$04$x"]
        assert users_sheet.append_row.call_args.kwargs == {"value_input_option": "RAW"}

    def test_read_failure_is_wrapped(self, directory, users_sheet):
        users_sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(GatewayError, match="quota exceeded"):
            directory.find_user("kid@example.com")
