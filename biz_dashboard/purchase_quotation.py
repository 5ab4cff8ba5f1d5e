# purchase_quotation.py
"""
Supplier purchase quotations in the "Purchase Quotation" tab, one row per
item (A:J = DATE, QUOTATION NO, SUPPLIER, BARCODE, NAME, QUANTITY, UNIT,
PRICE, TOTAL, NOTES). Saving a number again replaces its rows.
"""
import logging
import re

import pandas as pd

from biz_dashboard import config, validator
from biz_dashboard.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NUMBER_COLUMN = 1


def _sequence_pattern(year):
    return re.compile(rf'^PO-{year}-(\d+)$', re.IGNORECASE)


def next_sequence_number(values, year, prefix='PO'):
    """Max sequence among 'PO-<year>-NNN' values + 1, zero padded to 3."""
    pattern = _sequence_pattern(year)
    highest = 0
    for value in values:
        match = pattern.match(str(value).strip())
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{year}-{highest + 1:03d}"


def next_quotation_number(store, today=None):
    year = pd.Timestamp(today).year if today is not None else pd.Timestamp.now().year
    try:
        rows = store.get_values(config.QUOTATION_TAB)
    except Exception as e:
        logger.warning("⚠️  Could not read quotation numbers - %s", e)
        return f"PO-{year}-001"
    numbers = [row[NUMBER_COLUMN] for row in rows[1:] if len(row) > NUMBER_COLUMN]
    return next_sequence_number(numbers, year)


def _clean_items(items):
    cleaned = []
    for item in items or []:
        name = validator.clean_and_trim_string(item.get('name'))
        if not name:
            continue
        quantity = validator.clean_numeric(item.get('quantity'), default=0.0)
        price = validator.clean_numeric(item.get('price'), default=0.0)
        cleaned.append({
            'barcode': validator.clean_and_trim_string(item.get('barcode')) or '',
            'name': name,
            'quantity': quantity,
            'unit': validator.clean_and_trim_string(item.get('unit')) or config.QUOTATION_DEFAULT_UNIT,
            'price': price,
            'total': quantity * price,
            'notes': validator.clean_and_trim_string(item.get('notes')) or '',
        })
    return cleaned


def _rows_for_number(rows, number):
    target = number.strip().upper()
    return [
        offset + 2 for offset, row in enumerate(rows[1:])
        if len(row) > NUMBER_COLUMN and str(row[NUMBER_COLUMN]).strip().upper() == target
    ]


def save_quotation(store, data):
    """Validates and writes a quotation; returns the number of item rows written."""
    data = data or {}
    date = validator.clean_and_trim_string(data.get('date'))
    number = validator.clean_and_trim_string(data.get('quotation_number'))
    supplier = validator.clean_and_trim_string(data.get('supplier_name'))
    items = _clean_items(data.get('items'))

    missing = [name for name, value in (('date', date), ('quotation_number', number),
                                        ('supplier_name', supplier)) if not value]
    if missing:
        raise ValidationError("Missing required fields", ', '.join(missing))
    if not items:
        raise ValidationError("At least one item is required")

    existing = _rows_for_number(store.get_values(config.QUOTATION_TAB), number)
    if existing:
        logger.info("♻️  Replacing %d existing row(s) of %s", len(existing), number)
        store.delete_rows(config.QUOTATION_TAB, existing)

    store.append_rows(config.QUOTATION_TAB, [
        [date, number, supplier, item['barcode'], item['name'], item['quantity'],
         item['unit'], item['price'], item['total'], item['notes']]
        for item in items
    ])
    logger.info("✅ Saved quotation %s (%d items)", number, len(items))
    return len(items)


def search_quotation(store, number):
    number = (number or '').strip()
    if not number:
        raise ValidationError("Quotation number is required")

    rows = store.get_values(config.QUOTATION_TAB)
    matches = [rows[i - 1] for i in _rows_for_number(rows, number)]
    if not matches:
        raise NotFoundError("Quotation not found", number)

    width = len(config.QUOTATION_COLS)
    matches = [list(row) + [''] * (width - len(row)) for row in matches]
    first = dict(zip(config.QUOTATION_COLS, matches[0]))
    return {
        'date': first['date'],
        'quotation_number': first['quotation_number'],
        'supplier_name': first['supplier_name'],
        'items': [
            {
                'barcode': row[3],
                'name': row[4],
                'quantity': validator.clean_numeric(row[5], default=0.0),
                'unit': str(row[6]).strip() or config.QUOTATION_DEFAULT_UNIT,
                'price': validator.clean_numeric(row[7], default=0.0),
                'total': validator.clean_numeric(row[8], default=0.0),
                'notes': row[9],
            }
            for row in matches
        ],
    }
