# water_delivery.py
"""
Water delivery notes. Column A of the tab is the item catalogue; notes live
in C:F (DATE, DELIVERY NOTE NUMBER, ITEM NAME, QUANTITY), one row per item.
"""
import logging
import re

from biz_dashboard import config, sheets, validator
from biz_dashboard.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TAB = config.WATER_DELIVERY_TAB
START = sheets.column_index(config.WATER_NOTE_START_COLUMN)
DATE_COL, NUMBER_COL, ITEM_COL, QTY_COL = START, START + 1, START + 2, START + 3

_NUMBER_RE = re.compile(rf'^{re.escape(config.WATER_NOTE_PREFIX)}(\d+)$', re.IGNORECASE)


def _cell(row, index):
    return str(row[index]).strip() if len(row) > index else ''


def list_items(store):
    rows = store.get_values(TAB)
    return [_cell(row, 0) for row in rows[1:] if _cell(row, 0)]


def next_note_number(store):
    try:
        rows = store.get_values(TAB)
    except Exception as e:
        logger.warning("⚠️  Could not read delivery note numbers - %s", e)
        return f"{config.WATER_NOTE_PREFIX}001"

    highest = 0
    for row in rows[1:]:
        match = _NUMBER_RE.match(_cell(row, NUMBER_COL))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{config.WATER_NOTE_PREFIX}{highest + 1:03d}"


def _clean_items(items):
    """Drops items without a name or with a non-positive quantity."""
    cleaned = []
    for item in items or []:
        name = validator.clean_and_trim_string(item.get('name'))
        quantity = validator.clean_numeric(item.get('quantity'), default=0.0)
        if name and quantity > 0:
            cleaned.append({'name': name, 'quantity': quantity})
    if not cleaned:
        raise ValidationError("At least one item with a quantity is required")
    return cleaned


def save_note(store, date, number, items):
    date = validator.clean_and_trim_string(date)
    number = validator.clean_and_trim_string(number)
    if not date or not number:
        raise ValidationError("Date and delivery note number are required")
    items = _clean_items(items)

    store.append_rows(
        TAB,
        [[date, number, item['name'], item['quantity']] for item in items],
        start_column=config.WATER_NOTE_START_COLUMN,
    )
    logger.info("🚚 Saved delivery note %s (%d items)", number, len(items))
    return len(items)


def _note_rows(rows, number):
    target = number.strip().upper()
    return [
        (offset + 2, row) for offset, row in enumerate(rows[1:])
        if _cell(row, NUMBER_COL).upper() == target
    ]


def get_note(store, number):
    number = (number or '').strip()
    matches = _note_rows(store.get_values(TAB), number) if number else []
    if not matches:
        raise NotFoundError("Delivery note not found", number)
    return {
        'date': _cell(matches[0][1], DATE_COL),
        'number': _cell(matches[0][1], NUMBER_COL),
        'items': [
            {'name': _cell(row, ITEM_COL), 'quantity': validator.clean_numeric(_cell(row, QTY_COL), default=0.0)}
            for _, row in matches
        ],
        'row_indices': [row_index for row_index, _ in matches],
    }


def update_note(store, number, date, items):
    """
    Rewrites an existing note in place: existing rows are overwritten in
    order, extra items appended, leftover rows deleted.
    """
    date = validator.clean_and_trim_string(date)
    if not date:
        raise ValidationError("Date is required")
    items = _clean_items(items)
    row_indices = get_note(store, number)['row_indices']
    number = number.strip()

    values = [[date, number, item['name'], item['quantity']] for item in items]
    for row_index, row_values in zip(row_indices, values):
        store.update_row(TAB, row_index, row_values, start_column=config.WATER_NOTE_START_COLUMN)

    if len(values) > len(row_indices):
        store.append_rows(TAB, values[len(row_indices):], start_column=config.WATER_NOTE_START_COLUMN)
    elif len(row_indices) > len(values):
        store.delete_rows(TAB, row_indices[len(values):])

    logger.info("🚚 Updated delivery note %s (%d items)", number, len(items))
    return len(items)
