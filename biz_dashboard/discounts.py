# discounts.py
"""
Discount reconciliation tracker ("DISCOUNTS" A:C = CUSTOMER ID, CUSTOMER
NAME, RECONCILIATION). Column C holds the reconciled months as "JAN25, FEB25".
"""
import logging

import pandas as pd

from biz_dashboard import config, validator
from biz_dashboard.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NAME_COL = 1
MONTHS_COL = 2


def _cell(row, index):
    return str(row[index]).strip() if len(row) > index else ''


def _year(today):
    return pd.Timestamp(today).year if today is not None else pd.Timestamp.now().year


def list_entries(store, today=None):
    rows = store.get_values(config.DISCOUNTS_TAB)
    year = _year(today)
    return [
        {
            'customer_id': _cell(row, 0),
            'customer_name': _cell(row, NAME_COL),
            'reconciliation_months': validator.split_month_tokens(_cell(row, MONTHS_COL), year),
        }
        for row in rows[1:] if _cell(row, NAME_COL)
    ]


def _set_month(store, customer_name, month, today, marked):
    year = _year(today)
    key = validator.normalize_month_key(month, year)
    if not key:
        raise ValidationError("Invalid month", month)

    rows = store.get_values(config.DISCOUNTS_TAB)
    target = (customer_name or '').strip().lower()
    row_index = next(
        (offset + 2 for offset, row in enumerate(rows[1:]) if _cell(row, NAME_COL).lower() == target),
        None,
    )
    if row_index is None:
        raise NotFoundError("Customer not found in DISCOUNTS sheet", customer_name)

    months = set(validator.split_month_tokens(_cell(rows[row_index - 1], MONTHS_COL), year))
    if marked:
        months.add(key)
    else:
        months.discard(key)

    keys = sorted(months)
    store.update_cell(config.DISCOUNTS_TAB, row_index, MONTHS_COL,
                      ', '.join(validator.format_month_token(k) for k in keys))
    logger.info("🏷️  %s %s for %s", 'Marked' if marked else 'Unmarked', key, customer_name)
    return keys


def mark_month(store, customer_name, month, today=None):
    return _set_month(store, customer_name, month, today, marked=True)


def unmark_month(store, customer_name, month, today=None):
    return _set_month(store, customer_name, month, today, marked=False)
