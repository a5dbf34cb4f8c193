"""
services/account_service.py
---------------------------
Account balance history: listing, bulk CSV import and CSV export.
"""

from repositories.api_client import ApiClient
from models.account import Account, AccountHistory
from services.history_csv import ImportResult, export_history_csv, parse_history_csv
from utils.errors import BackendError
from utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_HEADERS = ("Date", "Balance", "Notes")


class AccountService:
    """Handles account history import/export."""

    def __init__(self, api: ApiClient):
        self.api = api

    def list_accounts(self) -> list[Account]:
        return self.api.list_accounts()

    def history(self, account_id: int) -> list[AccountHistory]:
        return self.api.list_account_history(account_id)

    def import_history_csv(self, account_id: int, text: str) -> ImportResult:
        """
        Create one history row per valid ``Date,Balance,Notes`` line.

        Rows the backend rejects are counted in ``failed`` and the import
        carries on with the next row.
        """
        result = parse_history_csv(text, value_columns=1)
        for row in result.rows:
            try:
                self.api.create_account_history(account_id, row.date, row.values[0], row.notes or None)
            except BackendError as e:
                logger.warning(f"Account #{account_id}: row {row.date} not imported: {e}")
                result.failed += 1
                continue
            result.imported += 1

        logger.info(
            f"Account #{account_id}: imported {result.imported}, "
            f"skipped {result.skipped}, failed {result.failed}"
        )
        return result

    def export_history_csv(self, history: list[AccountHistory]) -> bytes:
        """``"Date","Balance","Notes"`` CSV; dates and notes quoted, balances bare."""
        return export_history_csv(
            HISTORY_HEADERS, [(h.date, h.balance, h.notes) for h in history]
        )
