# notes.py
"""
Follow-up notes on debit customers, kept in the "Notes" tab
(A:E = USER, CUSTOMER NAME, NOTES, TIMING, SOLVED). Notes are addressed
by their sheet row.
"""
import logging
from datetime import datetime, timezone

from biz_dashboard import config, validator
from biz_dashboard.errors import ValidationError

logger = logging.getLogger(__name__)


def _timestamp(now=None):
    now = now or datetime.now(timezone.utc)
    return now.strftime(config.NOTES_TIMESTAMP_FORMAT)


def _solved_flag(value):
    return 'TRUE' if value else 'FALSE'


def _row_index(value):
    row_index = validator.clean_and_round_integer(value)
    if row_index is None or row_index < 2:
        raise ValidationError("Invalid row index", value)
    return row_index


def list_notes(store, customer_name=None):
    """All notes, or only one customer's (name compared case-insensitively)."""
    rows = store.get_values(config.NOTES_TAB)
    target = validator.normalize_name(customer_name) if customer_name else None

    notes = []
    for offset, row in enumerate(rows[1:]):
        row = list(row) + [''] * (5 - len(row))
        user, name, content, timing, solved = (str(v).strip() for v in row[:5])
        if not name and not content:
            continue
        if target and validator.normalize_name(name) != target:
            continue
        notes.append({
            'row_index': offset + 2,
            'user': user,
            'customer_name': name,
            'content': content,
            'timestamp': timing,
            'is_solved': solved.upper() == 'TRUE',
        })
    return notes


def add_note(store, user, customer_name, content, now=None):
    user = validator.clean_and_trim_string(user)
    customer_name = validator.clean_and_trim_string(customer_name)
    content = validator.clean_and_trim_string(content)
    if not user or not customer_name or not content:
        raise ValidationError("Missing required fields", "user, customer_name and content are required")

    store.append_rows(config.NOTES_TAB, [[user, customer_name, content, _timestamp(now), _solved_flag(False)]])
    logger.info("🗒️  Note added for %s by %s", customer_name, user)


def update_note(store, row_index, content, is_solved=False, now=None):
    """Rewrites the note text and solved flag, and refreshes its timestamp."""
    row_index = _row_index(row_index)
    content = validator.clean_and_trim_string(content)
    if not content:
        raise ValidationError("Missing required fields", "content is required")

    store.update_row(config.NOTES_TAB, row_index,
                     [content, _timestamp(now), _solved_flag(is_solved)],
                     start_column=config.NOTES_CONTENT_COLUMN)
    return row_index


def delete_note(store, row_index):
    row_index = _row_index(row_index)
    store.delete_rows(config.NOTES_TAB, [row_index])
    return row_index
