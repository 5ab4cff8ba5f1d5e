# sheets.py
"""
Thin wrapper over a gspread Spreadsheet.

Every module reads whole tabs and works on the values in memory; writes go
through the handful of operations below. Row indices are 1-based sheet rows
(the header is row 1, the first data row is row 2).
"""
import json
import logging

import gspread
from google.oauth2.service_account import Credentials as SA_Credentials

from biz_dashboard import config
from biz_dashboard.errors import ConfigurationError

logger = logging.getLogger(__name__)


def column_letter(index):
    """0-based column index -> A1 column letters (0 -> A, 26 -> AA)."""
    letters = ''
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def column_index(letter):
    """A1 column letters -> 0-based index."""
    index = 0
    for char in letter.upper():
        index = index * 26 + (ord(char) - 64)
    return index - 1


class SheetStore:
    def __init__(self, spreadsheet):
        self._spreadsheet = spreadsheet

    def _ws(self, tab):
        return self._spreadsheet.worksheet(tab)

    def get_values(self, tab):
        """All values of a tab as a list of rows (strings); trailing blanks may be trimmed."""
        return self._ws(tab).get_all_values()

    def append_rows(self, tab, rows, start_column='A'):
        if not rows:
            return
        ws = self._ws(tab)
        ws.append_rows(
            [list(row) for row in rows],
            value_input_option='USER_ENTERED',
            table_range=f"{start_column}1",
        )
        logger.info("📝 Appended %d row(s) to '%s' at column %s", len(rows), tab, start_column)

    def update_row(self, tab, row_index, values, start_column='A'):
        start = column_index(start_column)
        end_letter = column_letter(start + len(values) - 1)
        range_name = f"{start_column}{row_index}:{end_letter}{row_index}"
        self._ws(tab).update(
            range_name=range_name,
            values=[list(values)],
            value_input_option='USER_ENTERED',
        )
        logger.info("✏️  Updated '%s'!%s", tab, range_name)

    def update_cell(self, tab, row_index, col_index, value):
        """col_index is 0-based."""
        range_name = f"{column_letter(col_index)}{row_index}"
        self._ws(tab).update(
            range_name=range_name,
            values=[[value]],
            value_input_option='USER_ENTERED',
        )
        logger.info("✏️  Updated '%s'!%s", tab, range_name)

    def delete_rows(self, tab, row_indices):
        """Deletes each row, bottom-up so earlier indices stay valid."""
        if not row_indices:
            return
        ws = self._ws(tab)
        for row_index in sorted(set(row_indices), reverse=True):
            ws.delete_rows(row_index)
        logger.info("🗑️  Deleted %d row(s) from '%s'", len(set(row_indices)), tab)


def _load_credentials_info():
    if config.SERVICE_ACCOUNT_JSON:
        try:
            return json.loads(config.SERVICE_ACCOUNT_JSON)
        except ValueError as e:
            raise ConfigurationError("Failed to parse GOOGLE_SERVICE_ACCOUNT JSON", str(e))

    try:
        with open(config.SERVICE_ACCOUNT_FILE, encoding='utf-8') as fh:
            return json.load(fh)
    except FileNotFoundError:
        raise ConfigurationError(
            "GOOGLE_SERVICE_ACCOUNT is not set and no credentials file was found",
            str(config.SERVICE_ACCOUNT_FILE),
        )


def open_store():
    """Authorises with the service account and opens the configured spreadsheet."""
    if not config.SPREADSHEET_ID:
        raise ConfigurationError("Missing env var: GOOGLE_SHEET_ID")

    info = _load_credentials_info()
    creds = SA_Credentials.from_service_account_info(info, scopes=config.SHEETS_SCOPES)
    client = gspread.authorize(creds)
    logger.info("📊 Opening spreadsheet %s", config.SPREADSHEET_ID)
    return SheetStore(client.open_by_key(config.SPREADSHEET_ID))
