# routes/notes_routes.py
from flask import jsonify, request

from biz_dashboard import notes
from biz_dashboard.routes.helpers import arg_bool, get_store, json_body, list_response


def customer_notes():
    """
    GET    ?customer_name=...           -> notes (all when omitted)
    POST   {user, customer_name, content}
    PUT    {row_index, content, is_solved}
    DELETE {row_index}
    """
    store = get_store()

    if request.method == 'POST':
        body = json_body()
        notes.add_note(store, body.get('user'), body.get('customer_name'), body.get('content'))
        return jsonify({'success': True}), 201

    if request.method == 'PUT':
        body = json_body()
        notes.update_note(store, body.get('row_index'), body.get('content'), bool(body.get('is_solved')))
        return jsonify({'success': True})

    if request.method == 'DELETE':
        notes.delete_note(store, json_body().get('row_index'))
        return jsonify({'success': True})

    records = notes.list_notes(store, request.args.get('customer_name') or None)
    if arg_bool('unsolved_only'):
        records = [note for note in records if not note['is_solved']]
    return list_response('notes', records, 'notes.xlsx')
