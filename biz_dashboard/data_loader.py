# data_loader.py
import logging

import pandas as pd

from biz_dashboard import config, validator

logger = logging.getLogger(__name__)


def _pad(row, width):
    row = list(row[:width])
    return row + [''] * (width - len(row))


def _frame_from_rows(rows, columns, dtypes):
    """
    Builds a typed DataFrame from raw sheet values (header row already removed).
    Short rows are padded, strings trimmed, amounts comma-stripped (blank -> 0).
    """
    width = len(columns)
    df = pd.DataFrame([_pad(row, width) for row in rows], columns=columns)
    if df.empty:
        return pd.DataFrame(columns=columns)

    for col, dtype in dtypes.items():
        if dtype == 'string':
            df[col] = df[col].apply(lambda v: validator.clean_and_trim_string(v) or '')
        elif dtype == 'amount':
            df[col] = df[col].apply(lambda v: validator.clean_numeric(v, default=0.0)).astype(float)
    return df


def _with_parsed_dates(df, source_col, target_col):
    if df.empty:
        df[target_col] = pd.Series(dtype='datetime64[ns]')
        return df
    df[target_col] = pd.to_datetime(df[source_col].apply(validator.parse_date))
    return df


def load_ledger(store):
    """
    Loads the debit ledger (DATE, DUE DATE, NUMBER, CUSTOMER NAME, SALESREP,
    DEBIT, CREDIT, MATCHING). Rows without a customer name are dropped.
    """
    rows = store.get_values(config.LEDGER_TAB)
    df = _frame_from_rows(rows[1:], config.LEDGER_COLS, config.LEDGER_DTYPES)
    if not df.empty:
        df = df[df['customer_name'] != ''].reset_index(drop=True)

    df = _with_parsed_dates(df, 'date', 'parsed_date')
    df = _with_parsed_dates(df, 'due_date', 'parsed_due_date')
    for col in ('debit', 'credit'):
        df[col] = df[col].astype(float)

    logger.info("📂 Loaded %d ledger rows for %d customers",
                len(df), df['customer_name'].nunique() if not df.empty else 0)
    return df


def load_sales(store):
    """
    Loads "Sales - Invoices" line items. Rows without customer id, customer
    name or product are dropped.
    """
    rows = store.get_values(config.SALES_TAB)
    df = _frame_from_rows(rows[1:], config.SALES_COLS, config.SALES_DTYPES)
    if not df.empty:
        keep = (df['customer_id'] != '') & (df['customer_name'] != '') & (df['product'] != '')
        df = df[keep].reset_index(drop=True)

    df = _with_parsed_dates(df, 'invoice_date', 'parsed_date')
    for col in ('product_cost', 'product_price', 'amount', 'qty'):
        df[col] = df[col].astype(float)

    logger.info("📂 Loaded %d sales lines (%d invoices)",
                len(df), df['invoice_number'].nunique() if not df.empty else 0)
    return df


def _load_name_set(store, tab):
    rows = store.get_values(tab)
    names = {validator.normalize_name(row[0]) for row in rows[1:] if row and str(row[0]).strip()}
    logger.info("📂 Loaded %d names from '%s'", len(names), tab)
    return names


def load_closed_customers(store):
    return _load_name_set(store, config.CLOSED_CUSTOMERS_TAB)


def load_semi_closed_customers(store):
    return _load_name_set(store, config.SEMI_CLOSED_CUSTOMERS_TAB)


def load_inactive_exceptions(store):
    """Customer ids excluded from the inactive-customers report. A missing tab means none."""
    try:
        rows = store.get_values(config.INACTIVE_EXCEPTIONS_TAB)
    except Exception as e:
        logger.warning("⚠️  Could not read '%s' - %s. Using no exceptions.",
                       config.INACTIVE_EXCEPTIONS_TAB, e)
        return set()
    return {str(row[0]).strip() for row in rows[1:] if row and str(row[0]).strip()}
