import copy
import re

import gspread
import pandas as pd
import pytest

from biz_dashboard import config, data_loader
from biz_dashboard.app import create_app
from biz_dashboard.sheets import SheetStore, column_index

TODAY = pd.Timestamp('2025-06-30')

LEDGER_HEADER = ['DATE', 'DUE DATE', 'NUMBER', 'CUSTOMER NAME', 'SALESREP', 'DEBIT', 'CREDIT', 'MATCHING']
SALES_HEADER = [
    'INVOICE DATE', 'INVOICE NUMBER', 'CUSTOMER ID', 'CUSTOMER MAIN NAME', 'CUSTOMER NAME',
    'AREA', 'MARKET', 'MERCHANDISER', 'SALESREP', 'PRODUCT ID', 'BARCODE', 'PRODUCT',
    'PRODUCT TAG', 'PRODUCT COST', 'PRODUCT PRICE', 'AMOUNT', 'QTY',
]

TABS = {
    config.LEDGER_TAB: [
        LEDGER_HEADER,
        ['2025-01-10', '2025-02-09', 'SAL-001', 'Alpha Store', 'Ali', '1,000', '', 'M1'],
        ['2025-02-15', '', 'BNK-001', 'Alpha Store', 'Ali', '', '600', 'M1'],
        ['2025-06-01', '2025-06-30', 'SAL-002', 'Alpha Store', 'Ali', '500', '', ''],
        ['2025-06-20', '', 'BNK-002', 'Alpha Store', 'Ali', '', '200', ''],
        ['2024-11-05', '2024-12-05', 'SAL-003', 'Beta Mart', 'Sara', '2000', '', 'M2'],
        ['2024-12-01', '', 'RSAL-001', 'Beta Mart', 'Sara', '', '2000', 'M2'],
        ['2025-03-01', '', 'OB-001', 'Beta Mart', 'Sara', '300', '', ''],
        ['2025-05-15', '', 'BNK-003', 'Gamma Co', 'Ali', '', '1000', ''],
        ['2025-05-16', '', 'JV-001', 'Gamma Co', 'Ali', '50', '', ''],
        ['2025-01-01', '', 'SAL-999', '', '', '10', '', ''],
    ],
    config.SALES_TAB: [
        SALES_HEADER,
        ['2025-06-25', 'SAL-100', 'C1', 'Alpha', 'Alpha Store', 'North', 'M1', 'Mona', 'Ali',
         'P1', '111', 'Water 500ml', 'water', '1', '1.5', '150', '100'],
        ['2025-05-10', 'SAL-101', 'C1', 'Alpha', 'Alpha Store', 'North', 'M1', 'Mona', 'Ali',
         'P2', '222', 'Juice 1L', 'juice', '3', '4', '200', '50'],
        ['2025-06-05', 'SAL-102', 'C2', 'Beta', 'Beta Mart', 'South', 'M2', 'Omar', 'Sara',
         'P1', '111', 'Water 500ml', 'water', '1', '1.5', '300', '200'],
        ['2025-03-15', 'SAL-103', 'C3', 'Gamma', 'Gamma Co', 'South', 'M2', 'Omar', 'Sara',
         'P2', '222', 'Juice 1L', 'juice', '3', '4', '400', '100'],
        ['2025-05-20', 'RSAL-010', 'C3', 'Gamma', 'Gamma Co', 'South', 'M2', 'Omar', 'Sara',
         'P2', '222', 'Juice 1L', 'juice', '3', '4', '-40', '-10'],
        ['2025-06-01', 'SAL-104', '', 'Delta', 'Delta Trading', 'East', 'M3', 'Nour', 'Sara',
         'P3', '', 'Chips', 'snack', '1', '2', '10', '5'],
    ],
    config.CLOSED_CUSTOMERS_TAB: [['CUSTOMER NAME'], ['Delta  Trading']],
    config.SEMI_CLOSED_CUSTOMERS_TAB: [['CUSTOMER NAME'], ['Beta Mart']],
    config.INACTIVE_EXCEPTIONS_TAB: [['CUSTOMER ID'], ['C9']],
    config.PETTY_CASH_TAB: [
        ['DATE', 'TYPE', 'AMOUNT', 'NAME', 'DESCRIPTION', 'PAID?'],
        ['2025-06-01', 'Receipt', '1,000', 'Owner', 'Float', ''],
        ['2025-06-05', 'Expense', '250', 'Ahmed', 'Fuel', 'Yes'],
        ['2025-06-10', 'expense', '100', 'Sami', 'Tea', ''],
        ['', 'Receipt', '5', '', '', ''],
        ['2025-05-28', 'Other', '50', 'Rami', 'Misc', ''],
    ],
    config.QUOTATION_TAB: [
        ['DATE', 'QUOTATION NO', 'SUPPLIER', 'BARCODE', 'NAME', 'QUANTITY', 'UNIT', 'PRICE', 'TOTAL', 'NOTES'],
        ['2025-06-01', 'PO-2025-004', 'Blue Springs', '111', 'Water 500ml', '100', 'CTN', '12', '1200', ''],
        ['2025-06-01', 'PO-2025-004', 'Blue Springs', '222', 'Juice 1L', '20', '', '30', '600', 'urgent'],
        ['2025-06-10', 'PO-2025-010', 'Fresh Farms', '333', 'Snack Bar', '5', 'BOX', '8', '40', ''],
        ['2024-12-20', 'PO-2024-020', 'Old Supplier', '444', 'Gum', '1', '', '1', '1', ''],
    ],
    config.WATER_DELIVERY_TAB: [
        ['ITEMS', '', 'DATE', 'DELIVERY NOTE NUMBER', 'ITEM NAME', 'QUANTITY'],
        ['Water 5G', '', '2025-06-01', 'DN-001', 'Water 5G', '10'],
        ['Water 500ml', '', '2025-06-01', 'DN-001', 'Water 500ml', '5'],
        ['Cups', '', '2025-06-02', 'DN-002', 'Cups', '3'],
    ],
    config.INVENTORY_ORDERS_TAB: [
        ['Product ID', 'Barcode', 'Product Name', 'Min Q', 'Max Q', 'QINC', 'Tags', 'Qty On Hand', 'Qty Free To Use'],
        ['P1', '111', 'Water 500ml', '100', '500', '24', 'water', '80', '60'],
        ['P2', '222', 'Juice 1L', '10', '50', '6', 'juice', '0', '0'],
        ['', '333', 'Snack Bar', '0', '0', '0', 'snack', '20', '20'],
        ['', '', '', '', '', '', '', '', ''],
        ['P3', '', 'Chips', '5', '20', '0', '', '10', '10'],
    ],
    config.ORDERS_MAKE_TAB: [
        ['PONO', 'PRODUCT ID', 'BARCODE', 'PRODUCT NAME', 'QTY ORDER', 'STATUS'],
        ['PO-2025-001', 'P1', '111', 'Water 500ml', '48', 'Pending'],
        ['PO-2025-002', 'P2', '222', 'Juice 1L', '12', ''],
        ['PO-2025-002', 'P3', '', 'Chips', '6', 'Ordered'],
        ['PO-2024-009', 'P1', '111', 'Water 500ml', '24', 'Received'],
    ],
    config.DISCOUNTS_TAB: [
        ['CUSTOMER ID', 'CUSTOMER NAME', 'RECONCILIATION'],
        ['C1', 'Alpha Store', 'JAN25, FEB25'],
        ['C2', 'Beta Mart', ''],
    ],
    config.NOTES_TAB: [
        ['USER', 'CUSTOMER NAME', 'NOTES', 'TIMING', 'SOLVED'],
        ['sami', 'Alpha Store', 'Call back Monday', '06/01/2025, 10:00:00 AM', 'FALSE'],
        ['rana', 'Beta Mart', 'Promised a cheque', '06/02/2025, 09:30:00 AM', 'TRUE'],
        ['', '', '', '', ''],
        ['sami', 'alpha store', 'Cheque bounced', '06/10/2025, 04:15:00 PM', 'FALSE'],
    ],
}

_CELL_RE = re.compile(r'^([A-Z]+)(\d+)')


class FakeWorksheet:
    """In-memory stand-in for gspread.Worksheet covering the calls SheetStore makes."""

    def __init__(self, title, rows):
        self.title = title
        self.rows = [list(row) for row in rows]
        self.calls = []

    def get_all_values(self):
        width = max((len(row) for row in self.rows), default=0)
        return [[str(v) for v in row] + [''] * (width - len(row)) for row in self.rows]

    def append_rows(self, values, value_input_option=None, table_range=None):
        self.calls.append(('append_rows', table_range))
        start = column_index(_CELL_RE.match(table_range).group(1)) if table_range else 0
        for row in values:
            self.rows.append([''] * start + [str(v) for v in row])

    def update(self, range_name=None, values=None, value_input_option=None):
        self.calls.append(('update', range_name))
        letters, row_number = _CELL_RE.match(range_name).groups()
        row_index = int(row_number) - 1
        start = column_index(letters)
        while len(self.rows) <= row_index:
            self.rows.append([])
        row = self.rows[row_index]
        for offset, value in enumerate(values[0]):
            while len(row) <= start + offset:
                row.append('')
            row[start + offset] = str(value)

    def delete_rows(self, index):
        self.calls.append(('delete_rows', index))
        del self.rows[index - 1]


class FakeSpreadsheet:
    def __init__(self, tabs):
        self.tabs = {title: FakeWorksheet(title, rows) for title, rows in tabs.items()}

    def worksheet(self, title):
        if title not in self.tabs:
            raise gspread.exceptions.WorksheetNotFound(title)
        return self.tabs[title]


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def spreadsheet():
    return FakeSpreadsheet(copy.deepcopy(TABS))


@pytest.fixture
def store(spreadsheet):
    return SheetStore(spreadsheet)


@pytest.fixture
def ledger_df(store):
    return data_loader.load_ledger(store)


@pytest.fixture
def ledger_from_rows():
    """Builds a ledger frame from rows in the sheet's column order."""
    def build(rows):
        store = SheetStore(FakeSpreadsheet({config.LEDGER_TAB: [LEDGER_HEADER] + rows}))
        return data_loader.load_ledger(store)
    return build


@pytest.fixture
def sales_df(store):
    return data_loader.load_sales(store)


@pytest.fixture
def app(store):
    app = create_app(store=store, today=TODAY)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
