import pytest

from biz_dashboard import config, purchase_quotation
from biz_dashboard.errors import NotFoundError, ValidationError


def test_next_sequence_number_ignores_other_years():
    values = ['PO-2025-004', 'PO-2025-010', 'PO-2024-099', 'junk']
    assert purchase_quotation.next_sequence_number(values, 2025) == 'PO-2025-011'
    assert purchase_quotation.next_sequence_number([], 2026) == 'PO-2026-001'


def test_next_quotation_number(store, today):
    assert purchase_quotation.next_quotation_number(store, today) == 'PO-2025-011'


def test_next_quotation_number_falls_back_when_tab_missing(store, spreadsheet, today):
    del spreadsheet.tabs[config.QUOTATION_TAB]
    assert purchase_quotation.next_quotation_number(store, today) == 'PO-2025-001'


def test_search_quotation(store):
    quotation = purchase_quotation.search_quotation(store, 'po-2025-004')
    assert quotation['supplier_name'] == 'Blue Springs'
    assert [i['name'] for i in quotation['items']] == ['Water 500ml', 'Juice 1L']
    assert [i['unit'] for i in quotation['items']] == ['CTN', config.QUOTATION_DEFAULT_UNIT]
    assert quotation['items'][1]['notes'] == 'urgent'


def test_search_unknown_quotation(store):
    with pytest.raises(NotFoundError):
        purchase_quotation.search_quotation(store, 'PO-2025-999')


def test_save_quotation_replaces_existing_rows(store, spreadsheet):
    count = purchase_quotation.save_quotation(store, {
        'date': '2025-06-20',
        'quotation_number': 'PO-2025-004',
        'supplier_name': 'Blue Springs',
        'items': [
            {'barcode': '111', 'name': 'Water 500ml', 'quantity': '120', 'price': '11.5'},
            {'name': '', 'quantity': 1},
        ],
    })
    assert count == 1

    quotation = purchase_quotation.search_quotation(store, 'PO-2025-004')
    assert len(quotation['items']) == 1
    assert quotation['items'][0]['total'] == 1380
    assert quotation['items'][0]['unit'] == 'PIECE'

    numbers = [row[1] for row in spreadsheet.worksheet(config.QUOTATION_TAB).rows[1:]]
    assert numbers == ['PO-2025-010', 'PO-2024-020', 'PO-2025-004']


@pytest.mark.parametrize('data', [
    {'quotation_number': 'PO-2025-011', 'supplier_name': 'X', 'items': [{'name': 'A'}]},
    {'date': '2025-06-20', 'quotation_number': 'PO-2025-011', 'supplier_name': 'X', 'items': []},
])
def test_save_quotation_validation(store, data):
    with pytest.raises(ValidationError):
        purchase_quotation.save_quotation(store, data)
