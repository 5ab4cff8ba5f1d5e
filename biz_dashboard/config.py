# config.py
import os
from pathlib import Path

# === Base Directories and Paths ===
BASE_DIR = Path(__file__).resolve().parent
PROJECT_DIR = BASE_DIR.parent

# ============================================================
# GOOGLE SHEETS CONNECTION
# ============================================================
SPREADSHEET_ID = os.getenv("GOOGLE_SHEET_ID", "")
SERVICE_ACCOUNT_JSON = os.getenv("GOOGLE_SERVICE_ACCOUNT")   # full JSON text (hosted deploys)
SERVICE_ACCOUNT_FILE = Path(
    os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", PROJECT_DIR / "assets" / "service_account.json")
)
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# === Tab Names ===
LEDGER_TAB = os.getenv("GOOGLE_SHEET_NAME", "Invoices")
SALES_TAB = "Sales - Invoices"
CLOSED_CUSTOMERS_TAB = "Closed Customers"
SEMI_CLOSED_CUSTOMERS_TAB = "Semi-Closed Customers"
INACTIVE_EXCEPTIONS_TAB = "Inactive Customers - Exception"
PETTY_CASH_TAB = "Petty Cash"
QUOTATION_TAB = "Purchase Quotation"
WATER_DELIVERY_TAB = "Water - Delivery Note"
INVENTORY_ORDERS_TAB = "Inventory - Orders"
ORDERS_MAKE_TAB = "Inventory - Orders - Make"
DISCOUNTS_TAB = "DISCOUNTS"
NOTES_TAB = "Notes"

# ============================================================
# LEDGER (DEBIT) DATA CONFIGURATION
# ============================================================
# Columns A:H of the ledger tab, in sheet order
LEDGER_COLS = [
    'date',           # DATE
    'due_date',       # DUE DATE
    'number',         # NUMBER (SAL..., RSAL..., OB..., BNK...)
    'customer_name',  # CUSTOMER NAME
    'sales_rep',      # SALESREP
    'debit',          # DEBIT
    'credit',         # CREDIT
    'matching',       # MATCHING
]

LEDGER_DTYPES = {
    'date': 'string',
    'due_date': 'string',
    'number': 'string',
    'customer_name': 'string',
    'sales_rep': 'string',
    'debit': 'amount',
    'credit': 'amount',
    'matching': 'string',
}

# ============================================================
# SALES DATA CONFIGURATION
# ============================================================
# Columns A:Q of "Sales - Invoices" (MARKETS was inserted at G)
SALES_COLS = [
    'invoice_date',
    'invoice_number',
    'customer_id',
    'customer_main_name',
    'customer_name',
    'area',
    'market',
    'merchandiser',
    'sales_rep',
    'product_id',
    'barcode',
    'product',
    'product_tag',
    'product_cost',
    'product_price',
    'amount',
    'qty',
]

SALES_DTYPES = {col: 'string' for col in SALES_COLS}
SALES_DTYPES.update({
    'product_cost': 'amount',
    'product_price': 'amount',
    'amount': 'amount',
    'qty': 'amount',
})

# ============================================================
# PETTY CASH / QUOTATION / DELIVERY NOTE / ORDERS LAYOUTS
# ============================================================
PETTY_CASH_COLS = ['date', 'type', 'amount', 'name', 'description', 'paid']
PETTY_CASH_TYPES = ('Receipt', 'Expense')

QUOTATION_COLS = [
    'date', 'quotation_number', 'supplier_name', 'barcode', 'name',
    'quantity', 'unit', 'price', 'total', 'notes',
]
QUOTATION_DEFAULT_UNIT = 'PIECE'

WATER_NOTE_START_COLUMN = 'C'   # C:F = DATE, DN NUMBER, ITEM NAME, QUANTITY
WATER_NOTE_PREFIX = 'DN-'

ORDER_COLS = ['po_number', 'product_id', 'barcode', 'product_name', 'qty_order', 'status']
ORDER_DEFAULT_STATUS = 'Pending'

NOTES_CONTENT_COLUMN = 'C'   # C:E = NOTES, TIMING, SOLVED
NOTES_TIMESTAMP_FORMAT = '%m/%d/%Y, %I:%M:%S %p'

PAYMENT_PERIODS = ('daily', 'weekly', 'monthly', 'yearly')

# Fallback positions when the inventory header cannot be matched
INVENTORY_FALLBACK_INDEX = {
    'id': 0, 'barcode': 1, 'name': 2, 'minQ': 3, 'maxQ': 4,
    'qinc': 5, 'tags': 6, 'onHand': 7, 'free': 8,
}
SALES_FALLBACK_INDEX = {'date': 0, 'product_id': 8, 'qty': 15}

# ============================================================
# ANALYSIS THRESHOLDS
# ============================================================
BALANCE_TOLERANCE = 0.01
RECENT_WINDOW_DAYS = 90
INVENTORY_SALES_WINDOW_DAYS = 120
INVENTORY_MONTH_BUCKETS = 4
LOW_STOCK_RATIO = 0.25

AGING_BUCKETS = [
    # (key, upper bound in days overdue, inclusive)
    ('at_date', 0),
    ('one_to_thirty', 30),
    ('thirty_one_to_sixty', 60),
    ('sixty_one_to_ninety', 90),
    ('ninety_one_to_one_twenty', 120),
    ('older', None),
]

INACTIVE_MIN_DAYS = 10
INACTIVE_STATUSES = [
    # (status, lower bound in days, inclusive)
    ('Lost', 60),
    ('Inactive', 30),
    ('At Risk', 10),
]

DEFAULT_PAGE_SIZE = 50
