# routes/petty_cash_routes.py
import logging

from flask import jsonify, request

from biz_dashboard import petty_cash
from biz_dashboard.routes.helpers import get_store, json_body, list_response

logger = logging.getLogger(__name__)


def petty_cash_records():
    store = get_store()

    if request.method == 'POST':
        row_index = petty_cash.save_record(store, json_body())
        return jsonify({'success': True, 'row_index': row_index}), 201

    if request.method == 'PUT':
        petty_cash.update_record(store, json_body())
        return jsonify({'success': True})

    if request.method == 'DELETE':
        row_index = petty_cash.delete_record(store, json_body().get('row_index'))
        logger.info("🗑️  Deleted petty cash row %d", row_index)
        return jsonify({'success': True})

    records = petty_cash.list_records(store)
    return list_response('records', records, 'petty_cash.xlsx')


def petty_cash_summary():
    return jsonify(petty_cash.summary(petty_cash.list_records(get_store())))
