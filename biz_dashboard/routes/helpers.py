# routes/helpers.py
from flask import current_app, jsonify, request

from biz_dashboard import sheets, validator
from biz_dashboard.errors import ValidationError
from biz_dashboard.export import excel_response


def get_store():
    """The app's SheetStore, opened on first use."""
    store = current_app.config.get('SHEET_STORE')
    if store is None:
        store = sheets.open_store()
        current_app.config['SHEET_STORE'] = store
    return store


def get_today():
    """Reference date for the analytics (None = now); tests pin it via app.config['TODAY']."""
    return current_app.config.get('TODAY')


def json_body():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def arg_int(name, default=None):
    value = request.args.get(name)
    if value in (None, ''):
        return default
    number = validator.clean_and_round_integer(value)
    if number is None:
        raise ValidationError(f"'{name}' must be a number", value)
    return number


def arg_float(name, default=None):
    value = request.args.get(name)
    if value in (None, ''):
        return default
    number = validator.clean_numeric(value)
    if number is None:
        raise ValidationError(f"'{name}' must be a number", value)
    return number


def arg_date(name):
    value = request.args.get(name)
    if value in (None, ''):
        return None
    parsed = validator.parse_date(value)
    if parsed is None:
        raise ValidationError(f"'{name}' must be a date", value)
    return parsed


def arg_bool(name):
    return request.args.get(name, '').strip().lower() in ('1', 'true', 'yes')


def list_response(key, records, filename, **extra):
    """JSON {key: records, **extra}, or an xlsx download when ?format=xlsx."""
    if request.args.get('format', '').lower() == 'xlsx':
        return excel_response(records, filename)
    return jsonify({key: records, **extra})


def format_dates(records, *fields):
    """Timestamps -> 'YYYY-MM-DD' strings (None stays None)."""
    for record in records:
        for field in fields:
            value = record.get(field)
            record[field] = value.strftime('%Y-%m-%d') if value is not None and value == value else None
    return records
