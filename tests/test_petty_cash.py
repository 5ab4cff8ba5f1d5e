import pytest

from biz_dashboard import config, petty_cash
from biz_dashboard.errors import ValidationError


def entry(**overrides):
    payload = {
        'date': '2025-06-15',
        'type': 'Expense',
        'amount': '75.5',
        'name': 'Karim',
        'description': 'Stationery',
    }
    payload.update(overrides)
    return payload


def test_list_records(store):
    records = petty_cash.list_records(store)
    assert [r['id'] for r in records] == ['petty-cash-2', 'petty-cash-3', 'petty-cash-4', 'petty-cash-6']
    assert [r['type'] for r in records] == ['Receipt', 'Expense', 'Expense', 'Receipt']
    assert records[0]['amount'] == 1000


def test_summary(store):
    result = petty_cash.summary(petty_cash.list_records(store))
    assert result['total_receipts'] == 1050
    assert result['total_expenses'] == 350
    assert result['balance'] == 700
    assert result['unpaid_expenses_total'] == 100
    assert result['unpaid_expenses_count'] == 1
    assert [m['month_key'] for m in result['monthly']] == ['2025-05', '2025-06']
    assert result['monthly'][1]['expenses'] == 350


@pytest.mark.parametrize('overrides', [
    {'name': ''},
    {'description': None},
    {'type': 'Refund'},
    {'amount': '0'},
    {'amount': '-5'},
    {'amount': 'lots'},
])
def test_validate_entry_rejects(overrides):
    with pytest.raises(ValidationError):
        petty_cash.validate_entry(entry(**overrides))


def test_update_requires_row_index():
    with pytest.raises(ValidationError):
        petty_cash.validate_entry(entry(), require_row=True)


def test_save_record_appends(store, spreadsheet):
    row_index = petty_cash.save_record(store, entry())
    assert row_index == 7
    assert spreadsheet.worksheet(config.PETTY_CASH_TAB).rows[-1][:4] == ['2025-06-15', 'Expense', '75.5', 'Karim']


def test_update_record(store, spreadsheet):
    petty_cash.update_record(store, entry(row_index=3, amount='300', paid='Yes'))
    assert spreadsheet.worksheet(config.PETTY_CASH_TAB).rows[2] == [
        '2025-06-15', 'Expense', '300.0', 'Karim', 'Stationery', 'Yes',
    ]


def test_delete_record(store):
    petty_cash.delete_record(store, '3')
    assert [r['name'] for r in petty_cash.list_records(store)] == ['Owner', 'Sami', 'Rami']


def test_delete_rejects_header_row(store):
    with pytest.raises(ValidationError):
        petty_cash.delete_record(store, 1)
