import pytest

from biz_dashboard import config, inventory_orders
from biz_dashboard.errors import NotFoundError, ValidationError


@pytest.fixture
def products(store, today):
    return inventory_orders.product_orders(store, today)


def test_inventory_columns_fall_back_to_fixed_positions():
    columns = inventory_orders.inventory_columns(['A', 'B', 'C'])
    assert columns == config.INVENTORY_FALLBACK_INDEX


def test_sales_columns_use_exact_header_names():
    header = ['Invoice Date', 'x', 'Item Code', 'Pieces']
    assert inventory_orders.sales_columns(header) == {'date': 0, 'product_id': 2, 'qty': 3}
    assert inventory_orders.sales_columns([]) == config.SALES_FALLBACK_INDEX


def test_month_buckets(today):
    assert [label for _, label in inventory_orders.month_buckets(today)] == ['Mar 25', 'Apr 25', 'May 25', 'Jun 25']


def test_product_orders(products):
    assert [p['product_id'] for p in products] == ['P1', 'P2', 'BAR-333', 'P3']

    water = products[0]
    assert water['sales_qty'] == 300
    assert water['sales_breakdown'][-1] == {'label': 'Jun 25', 'qty': 300}
    assert water['row_index'] == 2
    assert water['stock_status'] == 'low_stock'

    juice = products[1]
    assert juice['sales_qty'] == 140
    assert [b['qty'] for b in juice['sales_breakdown']] == [100, 0, 40, 0]
    assert juice['stock_status'] == 'out_of_stock'

    assert products[2]['stock_status'] == 'in_stock'
    assert products[3]['sales_qty'] == 5
    assert products[3]['row_index'] == 6


def test_order_stats(products):
    assert inventory_orders.order_stats(products) == {'total_products': 4, 'low_stock': 1, 'out_of_stock': 1}


def test_filter_products(products):
    assert [p['product_id'] for p in inventory_orders.filter_products(products, search='juice')] == ['P2']
    assert len(inventory_orders.filter_products(products, status='in_stock')) == 2
    by_sales = inventory_orders.filter_products(products, sort='sales_qty', direction='desc')
    assert [p['product_id'] for p in by_sales] == ['P1', 'P2', 'P3', 'BAR-333']
    by_name = inventory_orders.filter_products(products, sort='product_name')
    assert by_name[0]['product_name'] == 'Chips'
    with pytest.raises(ValidationError):
        inventory_orders.filter_products(products, sort='colour')


def test_suggest_order_qty(products):
    assert [inventory_orders.suggest_order_qty(p) for p in products] == [456, 54, 0, 0]


def test_update_product_column(store, spreadsheet):
    col = inventory_orders.update_product_column(store, 3, 'maxQ', '60')
    assert col == 4
    assert spreadsheet.worksheet(config.INVENTORY_ORDERS_TAB).rows[2][4] == '60.0'
    with pytest.raises(ValidationError):
        inventory_orders.update_product_column(store, 3, 'price', 1)


def test_next_po_number(store, today):
    assert inventory_orders.next_po_number(store, today) == 'PO-2025-003'


def test_order_details_defaults_status(store):
    items = inventory_orders.order_details(store, 'PO-2025-002')
    assert [i['product_id'] for i in items] == ['P2', 'P3']
    assert items[0]['status'] == 'Pending'
    assert items[0]['qty_order'] == 12


def test_order_details_unknown(store):
    with pytest.raises(NotFoundError):
        inventory_orders.order_details(store, 'PO-1999-001')


def test_save_order_replaces_po_rows(store):
    inventory_orders.save_order(store, [
        {'po_number': 'PO-2025-002', 'product_id': 'P2', 'product_name': 'Juice 1L', 'qty_order': 18},
    ])
    items = inventory_orders.order_details(store, 'PO-2025-002')
    assert len(items) == 1
    assert items[0]['qty_order'] == 18
    assert inventory_orders.order_details(store, 'PO-2024-009')[0]['status'] == 'Received'


@pytest.mark.parametrize('items', [[], [['x']], [{'po_number': 'PO-2025-003'}, 'P1']])
def test_save_order_rejects_malformed_items(store, spreadsheet, items):
    before = [list(row) for row in spreadsheet.worksheet(config.ORDERS_MAKE_TAB).rows]
    with pytest.raises(ValidationError):
        inventory_orders.save_order(store, items)
    assert spreadsheet.worksheet(config.ORDERS_MAKE_TAB).rows == before
