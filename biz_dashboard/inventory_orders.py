# inventory_orders.py
"""
Product ordering: the "Inventory - Orders" catalogue joined with recent
sales quantities, stock status, order suggestions and the purchase orders
kept in "Inventory - Orders - Make".
"""
import logging
import math

import pandas as pd
from dateutil.relativedelta import relativedelta

from biz_dashboard import config, validator
from biz_dashboard.errors import NotFoundError, ValidationError
from biz_dashboard.purchase_quotation import next_sequence_number

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'product_id', 'barcode', 'product_name', 'qinc', 'min_q', 'max_q', 'tags',
    'qty_on_hand', 'qty_free_to_use', 'sales_qty',
}
STOCK_STATUSES = ('in_stock', 'low_stock', 'out_of_stock')
EDITABLE_COLUMNS = ('qinc', 'minQ', 'maxQ')


# ============================================================
# HEADER MAPPING
# ============================================================

def _find(header, predicate):
    for i, h in enumerate(header):
        if predicate(h):
            return i
    return -1


def _header_matchers():
    return {
        'id': lambda h: 'id' in h or 'code' in h,
        'barcode': lambda h: 'barcode' in h,
        'name': lambda h: ('name' in h or 'product' in h or 'item' in h) and 'id' not in h and 'code' not in h,
        'minQ': lambda h: 'min' in h,
        'maxQ': lambda h: 'max' in h,
        'qinc': lambda h: ('qinc' in h or 'units' in h or 'ctn' in h) and 'min' not in h and 'max' not in h,
        'tags': lambda h: 'tag' in h,
        'onHand': lambda h: 'on hand' in h or 'stock' in h,
        'free': lambda h: 'free' in h or 'avail' in h,
    }


def inventory_columns(header_row):
    """Column positions in the catalogue, matched loosely on header text."""
    header = [str(h).lower().strip() for h in header_row]
    columns = {}
    for key, matcher in _header_matchers().items():
        index = _find(header, matcher)
        columns[key] = index if index != -1 else config.INVENTORY_FALLBACK_INDEX[key]
    return columns


def sales_columns(header_row):
    header = [str(h).lower().strip() for h in header_row]
    exact = {
        'date': ('date', 'invoice date'),
        'product_id': ('product id', 'item code', 'code'),
        'qty': ('qty', 'quantity', 'pieces', 'pcs'),
    }
    columns = {}
    for key, names in exact.items():
        index = _find(header, lambda h: h in names)
        columns[key] = index if index != -1 else config.SALES_FALLBACK_INDEX[key]
    return columns


# ============================================================
# SALES QUANTITIES
# ============================================================

def month_buckets(today):
    """Month starts for 3 months ago ... current month, with 'Mon YY' labels."""
    first = pd.Timestamp(today).to_pydatetime().replace(day=1)
    starts = [first - relativedelta(months=i) for i in range(config.INVENTORY_MONTH_BUCKETS - 1, -1, -1)]
    return [(start.strftime('%Y-%m'), start.strftime('%b %y')) for start in starts]


def _cell(row, index):
    return str(row[index]).strip() if 0 <= index < len(row) else ''


def sales_quantities(sales_rows, today):
    """
    Returns a DataFrame indexed by product id with 'sales_qty' (last 120
    days) and one column per month bucket.
    """
    buckets = month_buckets(today)
    bucket_keys = [key for key, _ in buckets]
    if len(sales_rows) < 2:
        return pd.DataFrame(columns=['sales_qty'] + bucket_keys), buckets

    cols = sales_columns(sales_rows[0])
    records = []
    for row in sales_rows[1:]:
        product_id = _cell(row, cols['product_id'])
        date = validator.parse_date(_cell(row, cols['date']))
        qty = validator.clean_numeric(_cell(row, cols['qty']) or '0')
        if not product_id or date is None or qty is None:
            continue
        records.append({'product_id': product_id, 'date': date, 'qty': qty})

    if not records:
        return pd.DataFrame(columns=['sales_qty'] + bucket_keys), buckets

    df = pd.DataFrame(records)
    since = today - pd.Timedelta(days=config.INVENTORY_SALES_WINDOW_DAYS)
    df['recent_qty'] = df['qty'].where(df['date'] >= since, 0.0)
    df['month_key'] = df['date'].dt.strftime('%Y-%m')

    for key in bucket_keys:
        df[key] = df['qty'].where(df['month_key'] == key, 0.0)

    result = df.groupby('product_id')[['recent_qty'] + bucket_keys].sum()
    return result.rename(columns={'recent_qty': 'sales_qty'}), buckets


# ============================================================
# PRODUCT ORDERS
# ============================================================

def stock_status(qty_free_to_use, sales_qty):
    if qty_free_to_use <= 0:
        return 'out_of_stock'
    if qty_free_to_use < (sales_qty or 0) * config.LOW_STOCK_RATIO:
        return 'low_stock'
    return 'in_stock'


def _fallback_id(barcode, name, offset):
    if barcode:
        return f"BAR-{barcode}"
    if name:
        return "NAME-" + '_'.join(name.split())
    return f"ROW-{offset}"


def product_orders(store, today=None):
    today = pd.Timestamp(today).normalize() if today is not None else pd.Timestamp.now().normalize()
    inventory_rows = store.get_values(config.INVENTORY_ORDERS_TAB)
    if not inventory_rows:
        return []

    quantities, buckets = sales_quantities(store.get_values(config.SALES_TAB), today)
    cols = inventory_columns(inventory_rows[0])

    def number(row, key):
        return validator.clean_numeric(_cell(row, cols[key]), default=0.0)

    products = []
    for offset, row in enumerate(inventory_rows[1:]):
        name = _cell(row, cols['name'])
        if not name:
            continue
        barcode = _cell(row, cols['barcode'])
        product_id = _cell(row, cols['id']) or _fallback_id(barcode, name, offset)
        sold = quantities.loc[product_id] if product_id in quantities.index else None

        sales_qty = float(sold['sales_qty']) if sold is not None else 0.0
        free = number(row, 'free')
        products.append({
            'product_id': product_id,
            'barcode': barcode,
            'product_name': name,
            'min_q': number(row, 'minQ'),
            'max_q': number(row, 'maxQ'),
            'qinc': number(row, 'qinc'),
            'tags': _cell(row, cols['tags']),
            'qty_on_hand': number(row, 'onHand'),
            'qty_free_to_use': free,
            'sales_qty': sales_qty,
            'sales_breakdown': [
                {'label': label, 'qty': float(sold[key]) if sold is not None else 0.0}
                for key, label in buckets
            ],
            'row_index': offset + 2,
            'stock_status': stock_status(free, sales_qty),
        })

    logger.info("📦 Built %d product order rows", len(products))
    return products


def order_stats(products):
    return {
        'total_products': len(products),
        'low_stock': sum(1 for p in products if p['stock_status'] == 'low_stock'),
        'out_of_stock': sum(1 for p in products if p['stock_status'] == 'out_of_stock'),
    }


def filter_products(products, search='', status='all', sort='qty_free_to_use', direction='asc'):
    if search and search.strip():
        query = search.strip().lower()
        products = [
            p for p in products
            if any(query in p[field].lower() for field in ('product_name', 'barcode', 'product_id', 'tags'))
        ]

    if status and status != 'all':
        if status not in STOCK_STATUSES:
            raise ValidationError("Invalid status filter", status)
        products = [p for p in products if p['stock_status'] == status]

    if sort not in SORT_FIELDS:
        raise ValidationError("Invalid sort field", sort)
    if not products:
        return products
    if isinstance(products[0][sort], str):
        return sorted(products, key=lambda p: p[sort].lower(), reverse=direction == 'desc')
    return sorted(products, key=lambda p: p[sort], reverse=direction == 'desc')


def suggest_order_qty(product):
    """Tops free stock up to max when it falls below min, in whole qinc packs."""
    free = product['qty_free_to_use']
    if free >= product['min_q']:
        return 0
    needed = product['max_q'] - free
    if needed <= 0:
        return 0
    pack = product['qinc'] if product['qinc'] > 0 else 1
    return int(math.ceil(needed / pack) * pack)


def update_product_column(store, row_index, column, value):
    """Writes qinc / minQ / maxQ for one catalogue row."""
    if column not in EDITABLE_COLUMNS:
        raise ValidationError("Invalid field", f"Must be one of {', '.join(EDITABLE_COLUMNS)}")
    row_index = validator.clean_and_round_integer(row_index)
    if row_index is None or row_index < 2:
        raise ValidationError("Invalid row index")
    number = validator.clean_numeric(value)
    if number is None:
        raise ValidationError("Value must be numeric")

    rows = store.get_values(config.INVENTORY_ORDERS_TAB)
    header = [str(h).lower().strip() for h in (rows[0] if rows else [])]
    loose = {
        'qinc': lambda h: 'qinc' in h or 'units' in h or 'ctn' in h,
        'minQ': lambda h: 'min' in h,
        'maxQ': lambda h: 'max' in h,
    }
    col_index = _find(header, loose[column])
    if col_index == -1:
        col_index = config.INVENTORY_FALLBACK_INDEX[column]

    store.update_cell(config.INVENTORY_ORDERS_TAB, row_index, col_index, number)
    return col_index


# ============================================================
# PURCHASE ORDERS
# ============================================================

def next_po_number(store, today=None):
    year = pd.Timestamp(today).year if today is not None else pd.Timestamp.now().year
    try:
        rows = store.get_values(config.ORDERS_MAKE_TAB)
    except Exception as e:
        logger.warning("⚠️  Could not read PO numbers - %s", e)
        return f"PO-{year}-001"
    return next_sequence_number([_cell(row, 0) for row in rows[1:]], year)


def save_order(store, items):
    """Replaces every row of the order's PO number with the given items."""
    if not items or not all(isinstance(item, dict) for item in items):
        raise ValidationError("Invalid order items")
    po_number = validator.clean_and_trim_string(items[0].get('po_number'))
    if not po_number:
        raise ValidationError("PO number is required")

    rows = store.get_values(config.ORDERS_MAKE_TAB)
    existing = [offset + 2 for offset, row in enumerate(rows[1:]) if _cell(row, 0) == po_number]
    if existing:
        store.delete_rows(config.ORDERS_MAKE_TAB, existing)

    store.append_rows(config.ORDERS_MAKE_TAB, [
        [
            validator.clean_and_trim_string(item.get('po_number')) or po_number,
            validator.clean_and_trim_string(item.get('product_id')) or '',
            validator.clean_and_trim_string(item.get('barcode')) or '',
            validator.clean_and_trim_string(item.get('product_name')) or '',
            validator.clean_and_round_integer(item.get('qty_order'), default=0),
            validator.clean_and_trim_string(item.get('status')) or config.ORDER_DEFAULT_STATUS,
        ]
        for item in items
    ])
    logger.info("🧾 Saved order %s (%d items, replaced %d)", po_number, len(items), len(existing))
    return po_number


def order_details(store, po_number):
    po_number = (po_number or '').strip()
    rows = store.get_values(config.ORDERS_MAKE_TAB)
    items = [
        {
            'po_number': _cell(row, 0),
            'product_id': _cell(row, 1),
            'barcode': _cell(row, 2),
            'product_name': _cell(row, 3),
            'qty_order': validator.clean_and_round_integer(_cell(row, 4), default=0),
            'status': _cell(row, 5) or config.ORDER_DEFAULT_STATUS,
        }
        for row in rows[1:] if _cell(row, 0) == po_number
    ]
    if not items:
        raise NotFoundError("Order not found", po_number)
    return items
