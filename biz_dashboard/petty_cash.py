# petty_cash.py
"""
Petty cash book kept in the "Petty Cash" tab (A:F = DATE, TYPE, AMOUNT,
NAME, DESCRIPTION, PAID?). Records are addressed by their sheet row.
"""
import logging

from biz_dashboard import config, validator
from biz_dashboard.errors import ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('date', 'type', 'amount', 'name', 'description')
PAID_VALUES = {'yes', 'y', 'paid', 'true', '1'}


def _record_type(value):
    return 'Expense' if (value or '').strip().lower() == 'expense' else 'Receipt'


def list_records(store):
    rows = store.get_values(config.PETTY_CASH_TAB)
    records = []
    for offset, row in enumerate(rows[1:]):
        row = list(row) + [''] * (len(config.PETTY_CASH_COLS) - len(row))
        date, kind, amount, name, description, paid = (str(v).strip() for v in row[:6])
        if not date or not name:
            continue
        row_index = offset + 2
        records.append({
            'id': f"petty-cash-{row_index}",
            'row_index': row_index,
            'date': date,
            'type': _record_type(kind),
            'amount': validator.clean_numeric(amount, default=0.0),
            'name': name,
            'description': description,
            'paid': paid,
        })
    logger.info("💵 Loaded %d petty cash records", len(records))
    return records


def validate_entry(payload, require_row=False):
    """Returns the cleaned entry or raises ValidationError."""
    payload = payload or {}
    required = REQUIRED_FIELDS + (('row_index',) if require_row else ())
    missing = [field for field in required if validator.clean_and_trim_string(payload.get(field)) in (None, '')]
    if missing:
        raise ValidationError("Missing required fields", ', '.join(missing))

    kind = str(payload['type']).strip()
    if kind not in config.PETTY_CASH_TYPES:
        raise ValidationError("Invalid type", f"Expected one of {', '.join(config.PETTY_CASH_TYPES)}")

    amount = validator.clean_numeric(payload['amount'])
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be a positive number")

    entry = {
        'date': str(payload['date']).strip(),
        'type': kind,
        'amount': amount,
        'name': str(payload['name']).strip(),
        'description': str(payload['description']).strip(),
        'paid': validator.clean_and_trim_string(payload.get('paid')) or '',
    }
    if require_row:
        row_index = validator.clean_and_round_integer(payload['row_index'])
        if row_index is None or row_index < 2:
            raise ValidationError("Invalid row index")
        entry['row_index'] = row_index
    return entry


def _row_values(entry):
    return [entry['date'], entry['type'], entry['amount'], entry['name'], entry['description'], entry['paid']]


def save_record(store, payload):
    entry = validate_entry(payload)
    store.append_rows(config.PETTY_CASH_TAB, [_row_values(entry)])
    row_index = len(store.get_values(config.PETTY_CASH_TAB))
    logger.info("✅ Saved petty cash %s of %.2f at row %d", entry['type'], entry['amount'], row_index)
    return row_index


def update_record(store, payload):
    entry = validate_entry(payload, require_row=True)
    store.update_row(config.PETTY_CASH_TAB, entry['row_index'], _row_values(entry))
    return entry['row_index']


def delete_record(store, row_index):
    row_index = validator.clean_and_round_integer(row_index)
    if row_index is None or row_index < 2:
        raise ValidationError("Invalid row index")
    store.delete_rows(config.PETTY_CASH_TAB, [row_index])
    return row_index


def summary(records):
    receipts = sum(r['amount'] for r in records if r['type'] == 'Receipt')
    expenses = sum(r['amount'] for r in records if r['type'] == 'Expense')
    unpaid = [r for r in records
              if r['type'] == 'Expense' and r['paid'].strip().lower() not in PAID_VALUES]

    by_month = {}
    for record in records:
        parsed = validator.parse_date(record['date'])
        if parsed is None:
            continue
        bucket = by_month.setdefault(parsed.strftime('%Y-%m'), {'receipts': 0.0, 'expenses': 0.0})
        bucket['receipts' if record['type'] == 'Receipt' else 'expenses'] += record['amount']

    return {
        'total_receipts': receipts,
        'total_expenses': expenses,
        'balance': receipts - expenses,
        'unpaid_expenses_total': sum(r['amount'] for r in unpaid),
        'unpaid_expenses_count': len(unpaid),
        'monthly': [
            {'month_key': key, **values, 'net': values['receipts'] - values['expenses']}
            for key, values in sorted(by_month.items())
        ],
    }
