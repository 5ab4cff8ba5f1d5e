# routes/inventory_routes.py
import logging

from flask import jsonify, request

from biz_dashboard import inventory_orders
from biz_dashboard.errors import ValidationError
from biz_dashboard.routes.helpers import get_store, get_today, json_body, list_response

logger = logging.getLogger(__name__)


def product_orders():
    products = inventory_orders.product_orders(get_store(), get_today())
    stats = inventory_orders.order_stats(products)
    products = inventory_orders.filter_products(
        products,
        search=request.args.get('search', ''),
        status=request.args.get('status', 'all'),
        sort=request.args.get('sort', 'qty_free_to_use'),
        direction=request.args.get('direction', 'asc'),
    )
    for product in products:
        product['suggested_qty'] = inventory_orders.suggest_order_qty(product)
    return list_response('data', products, 'product_orders.xlsx', stats=stats)


def update_qinc():
    body = json_body()
    inventory_orders.update_product_column(get_store(), body.get('row_index'), 'qinc', body.get('qinc'))
    return jsonify({'success': True})


def update_limit():
    body = json_body()
    field = body.get('field')
    if field not in ('minQ', 'maxQ'):
        raise ValidationError("Invalid field. Must be minQ or maxQ", field)
    inventory_orders.update_product_column(get_store(), body.get('row_index'), field, body.get('value'))
    return jsonify({'success': True})


def next_po():
    return jsonify({'next_number': inventory_orders.next_po_number(get_store(), get_today())})


def make_order():
    items = json_body().get('items')
    if not isinstance(items, list) or not items:
        raise ValidationError("Invalid order items")
    po_number = inventory_orders.save_order(get_store(), items)
    logger.info("🧾 Order %s submitted with %d lines", po_number, len(items))
    return jsonify({'success': True, 'po_number': po_number}), 201


def order_details(po_number):
    return jsonify({'data': inventory_orders.order_details(get_store(), po_number)})
