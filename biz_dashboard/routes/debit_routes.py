# routes/debit_routes.py
import logging

from flask import jsonify, request

from biz_dashboard import config, data_loader, ledger, scoring
from biz_dashboard.routes.helpers import (
    arg_bool, arg_date, arg_int, format_dates, get_store, get_today, list_response,
)

logger = logging.getLogger(__name__)

LEDGER_FIELDS = config.LEDGER_COLS


def sheet_data():
    """Raw ledger rows."""
    df = data_loader.load_ledger(get_store())
    records = df[LEDGER_FIELDS].to_dict(orient='records')
    return list_response('data', records, 'ledger.xlsx')


def debit_customers():
    store = get_store()
    today = get_today()
    df = data_loader.load_ledger(store)

    summary = ledger.customer_summary(df)
    summary = ledger.filter_customers(
        summary,
        search=request.args.get('search', ''),
        open_only=arg_bool('open_only'),
    )

    rated = scoring.rate_customers(ledger.customer_analysis(df, today),
                                   data_loader.load_closed_customers(store), today)
    ratings = dict(zip(rated['customer_name'], rated['rating']))

    records = summary.to_dict(orient='records')
    for record in records:
        record['rating'] = ratings.get(record['customer_name'])

    logger.info("👥 Debit customers: %d", len(records))
    return list_response('customers', records, 'customers.xlsx')


def debit_customer(name):
    store = get_store()
    today = get_today()
    df = data_loader.load_ledger(store)

    transactions = ledger.customer_transactions(df, name)
    rows = df[df['customer_name'].str.lower() == name.strip().lower()]
    analysis = scoring.rate_customers(ledger.customer_analysis(rows, today),
                                      data_loader.load_closed_customers(store), today)
    summary = format_dates(analysis.to_dict(orient='records'), 'last_payment_date', 'last_sales_date')[0]

    if request.args.get('format', '').lower() == 'xlsx':
        return list_response('transactions', transactions, f"{summary['customer_name']}.xlsx")
    return jsonify({'customer': summary, 'transactions': transactions})


def open_matches():
    df = data_loader.load_ledger(get_store())
    items = ledger.filter_open_matches(
        ledger.open_matches(df),
        item_type=request.args.get('type', 'ALL'),
        date_from=arg_date('from'),
        date_to=arg_date('to'),
        search=request.args.get('search', ''),
    )
    records = items.to_dict(orient='records')

    if request.args.get('format', '').lower() == 'xlsx':
        return list_response('items', records, 'open_matches.xlsx')

    page = ledger.paginate(
        records,
        page=arg_int('page', 0),
        page_size=arg_int('page_size', config.DEFAULT_PAGE_SIZE),
    )
    return jsonify(page)


def debit_ages():
    df = data_loader.load_ledger(get_store())
    aged = ledger.aging(df, get_today())

    search = request.args.get('search', '').strip().lower()
    if search:
        aged = aged[aged['customer_name'].str.lower().str.contains(search, regex=False)]

    return list_response('customers', aged.to_dict(orient='records'), 'ages.xlsx',
                         totals=ledger.aging_totals(aged))


def debit_years():
    store = get_store()
    df = data_loader.load_ledger(store)
    years = ledger.year_rollup(df, data_loader.load_closed_customers(store), get_today())
    return list_response('years', years, 'years.xlsx')


def debit_months():
    df = data_loader.load_ledger(get_store())
    months = ledger.month_rollup(df)
    return list_response('months', months, 'months.xlsx')


def debit_sales_reps():
    store = get_store()
    df = data_loader.load_ledger(store)
    reps = ledger.sales_rep_rollup(df, data_loader.load_closed_customers(store), get_today())
    return list_response('sales_reps', reps, 'sales_reps.xlsx')


def closed_customers():
    store = get_store()
    return jsonify({
        'closed': sorted(data_loader.load_closed_customers(store)),
        'semi_closed': sorted(data_loader.load_semi_closed_customers(store)),
    })


def _filtered_payments():
    df = data_loader.load_ledger(get_store())
    return ledger.payments(
        df,
        date_from=arg_date('from'),
        date_to=arg_date('to'),
        sales_rep=request.args.get('sales_rep') or None,
        search=request.args.get('search', ''),
    )


def debit_payments():
    pays = _filtered_payments()
    records = pays[ledger.PAYMENT_COLUMNS].to_dict(orient='records')
    return list_response('payments', records, 'payments.xlsx',
                         total=float(pays['amount'].sum()), count=len(records))


def debit_payments_by_customer():
    customers = ledger.payments_by_customer(_filtered_payments())
    return list_response('customers', customers, 'payments_by_customer.xlsx')


def debit_payments_by_period():
    period = request.args.get('period', 'monthly')
    periods = ledger.payments_by_period(_filtered_payments(), period)
    return list_response('periods', periods, f"payments_{period}.xlsx", period=period)
