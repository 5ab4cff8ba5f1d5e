# routes/purchase_quotation_routes.py
from flask import jsonify, request

from biz_dashboard import purchase_quotation
from biz_dashboard.routes.helpers import get_store, get_today, json_body


def purchase_quotation_view():
    store = get_store()
    if request.method == 'POST':
        count = purchase_quotation.save_quotation(store, json_body())
        return jsonify({'success': True, 'items_saved': count}), 201
    return jsonify({'next_number': purchase_quotation.next_quotation_number(store, get_today())})


def purchase_quotation_search():
    quotation = purchase_quotation.search_quotation(get_store(), request.args.get('number', ''))
    return jsonify({'data': quotation})
