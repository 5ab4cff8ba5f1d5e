# routes/water_delivery_routes.py
from flask import jsonify, request

from biz_dashboard import water_delivery
from biz_dashboard.routes.helpers import get_store, json_body


def water_delivery_note():
    """
    GET  ?action=next-number -> next DN number
    GET  ?number=DN-007      -> that note
    GET                      -> item catalogue
    POST                     -> save a new note
    PUT                      -> rewrite an existing note
    """
    store = get_store()

    if request.method == 'POST':
        body = json_body()
        count = water_delivery.save_note(store, body.get('date'), body.get('number'), body.get('items'))
        return jsonify({'success': True, 'items_saved': count}), 201

    if request.method == 'PUT':
        body = json_body()
        count = water_delivery.update_note(store, body.get('number') or '', body.get('date'), body.get('items'))
        return jsonify({'success': True, 'items_saved': count})

    if request.args.get('action') == 'next-number':
        return jsonify({'next_number': water_delivery.next_note_number(store)})

    number = request.args.get('number')
    if number:
        return jsonify({'data': water_delivery.get_note(store, number)})

    return jsonify({'data': water_delivery.list_items(store)})
