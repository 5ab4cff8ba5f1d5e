# routes/discount_routes.py
from flask import jsonify, request

from biz_dashboard import discounts
from biz_dashboard.errors import ValidationError
from biz_dashboard.routes.helpers import get_store, get_today, json_body, list_response


def discount_entries():
    return list_response('data', discounts.list_entries(get_store(), get_today()), 'discounts.xlsx')


def reconcile():
    """POST marks a month for a customer; DELETE (or POST with action=unmark) clears it."""
    body = json_body()
    customer_name = body.get('customer_name')
    month = body.get('month')
    if not customer_name or not month:
        raise ValidationError("customer_name and month are required")

    if request.method == 'DELETE' or body.get('action') == 'unmark':
        months = discounts.unmark_month(get_store(), customer_name, month, get_today())
    else:
        months = discounts.mark_month(get_store(), customer_name, month, get_today())
    return jsonify({'reconciliation_months': months})
