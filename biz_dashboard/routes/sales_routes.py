# routes/sales_routes.py
from flask import jsonify, request

from biz_dashboard import config, data_loader, sales_analytics
from biz_dashboard.routes.helpers import arg_date, arg_float, arg_int, get_store, get_today, list_response


def _filtered_sales():
    """Sales lines narrowed by the query-string filters shared by every sales endpoint."""
    sales = data_loader.load_sales(get_store())
    return sales_analytics.filter_sales(
        sales,
        year=arg_int('year'),
        month=arg_int('month'),
        date_from=arg_date('from'),
        date_to=arg_date('to'),
        area=request.args.get('area') or None,
        merchandiser=request.args.get('merchandiser') or None,
        sales_rep=request.args.get('sales_rep') or None,
    )


def sales_data():
    sales = _filtered_sales()
    records = sales[config.SALES_COLS].to_dict(orient='records')
    return list_response('data', records, 'sales.xlsx')


def sales_overview():
    return jsonify(sales_analytics.overview(_filtered_sales()))


def sales_monthly():
    return list_response('months', sales_analytics.monthly_trend(_filtered_sales()), 'sales_monthly.xlsx')


def sales_statistics():
    dimension = request.args.get('dimension', 'area')
    stats = sales_analytics.dimension_statistics(_filtered_sales(), dimension)
    return list_response('statistics', stats, f"sales_by_{dimension}.xlsx", dimension=dimension)


def sales_top():
    by = request.args.get('by', 'customer')
    ranked = sales_analytics.top_n(_filtered_sales(), by=by, n=arg_int('n', 10))
    return list_response('top', ranked, f"top_{by}s.xlsx", by=by)


def inactive_customers():
    store = get_store()
    customers = sales_analytics.inactive_customers(
        data_loader.load_sales(store),
        data_loader.load_inactive_exceptions(store),
        get_today(),
    )
    customers = sales_analytics.filter_inactive(
        customers,
        min_days=arg_int('min_days'),
        min_amount=arg_float('min_amount'),
        status=request.args.get('status') or None,
        search=request.args.get('search', ''),
    )
    return list_response('customers', customers, 'inactive_customers.xlsx')
