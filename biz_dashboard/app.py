# app.py
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
import logging

from biz_dashboard import config
from biz_dashboard.errors import DashboardError

# Import all route functions
from biz_dashboard.routes.debit_routes import (
    sheet_data, debit_customers, debit_customer, open_matches, debit_ages,
    debit_years, debit_months, debit_sales_reps, closed_customers,
    debit_payments, debit_payments_by_customer, debit_payments_by_period,
)
from biz_dashboard.routes.sales_routes import (
    sales_data, sales_overview, sales_monthly, sales_statistics, sales_top, inactive_customers,
)
from biz_dashboard.routes.petty_cash_routes import petty_cash_records, petty_cash_summary
from biz_dashboard.routes.purchase_quotation_routes import purchase_quotation_view, purchase_quotation_search
from biz_dashboard.routes.water_delivery_routes import water_delivery_note
from biz_dashboard.routes.inventory_routes import (
    product_orders, update_qinc, update_limit, next_po, make_order, order_details,
)
from biz_dashboard.routes.discount_routes import discount_entries, reconcile
from biz_dashboard.routes.notes_routes import customer_notes

# Configure logging
logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def handle_dashboard_error(error):
    if error.status_code >= 500:
        logger.error("❌ %s: %s", error.message, error.details)
    else:
        logger.warning("⚠️  %s: %s", error.message, error.details)
    return jsonify(error.to_dict()), error.status_code


def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return jsonify({'error': error.name, 'details': error.description}), error.code
    logger.exception("❌ Unhandled error")
    return jsonify({'error': 'Internal server error', 'details': str(error)}), 500


def health():
    return jsonify({'status': 'ok'})


def create_app(store=None, today=None):
    """
    Builds the Flask app. `store` is a SheetStore (opened from the
    environment on first request when None); `today` pins the reference
    date for the analytics.
    """
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config['SHEET_STORE'] = store
    app.config['TODAY'] = today

    app.register_error_handler(DashboardError, handle_dashboard_error)
    app.register_error_handler(Exception, handle_unexpected_error)

    # ============================================================
    # Route Registration
    # ============================================================

    app.route("/health")(health)

    # Debit ledger
    app.route("/api/sheets")(sheet_data)
    app.route("/api/debit/customers")(debit_customers)
    app.route("/api/debit/customer/<path:name>")(debit_customer)
    app.route("/api/debit/open-matches")(open_matches)
    app.route("/api/debit/ages")(debit_ages)
    app.route("/api/debit/years")(debit_years)
    app.route("/api/debit/months")(debit_months)
    app.route("/api/debit/sales-reps")(debit_sales_reps)
    app.route("/api/debit/payments")(debit_payments)
    app.route("/api/debit/payments/by-customer")(debit_payments_by_customer)
    app.route("/api/debit/payments/by-period")(debit_payments_by_period)
    app.route("/api/notes", methods=["GET", "POST", "PUT", "DELETE"])(customer_notes)
    app.route("/api/closed-customers")(closed_customers)

    # Sales
    app.route("/api/sales")(sales_data)
    app.route("/api/sales/overview")(sales_overview)
    app.route("/api/sales/monthly")(sales_monthly)
    app.route("/api/sales/statistics")(sales_statistics)
    app.route("/api/sales/top")(sales_top)
    app.route("/api/sales/inactive")(inactive_customers)

    # Petty cash
    app.route("/api/petty-cash", methods=["GET", "POST", "PUT", "DELETE"])(petty_cash_records)
    app.route("/api/petty-cash/summary")(petty_cash_summary)

    # Purchase quotations & delivery notes
    app.route("/api/purchase-quotation", methods=["GET", "POST"])(purchase_quotation_view)
    app.route("/api/purchase-quotation/search")(purchase_quotation_search)
    app.route("/api/water-delivery-note", methods=["GET", "POST", "PUT"])(water_delivery_note)

    # Inventory ordering
    app.route("/api/inventory/orders")(product_orders)
    app.route("/api/inventory/update-qinc", methods=["POST", "PUT"])(update_qinc)
    app.route("/api/inventory/update-limit", methods=["POST", "PUT"])(update_limit)
    app.route("/api/inventory/next-po")(next_po)
    app.route("/api/inventory/make-order", methods=["POST"])(make_order)
    app.route("/api/inventory/order/<path:po_number>")(order_details)

    # Discount tracker
    app.route("/api/discounts")(discount_entries)
    app.route("/api/discounts/reconcile", methods=["POST", "DELETE"])(reconcile)

    return app


# ============================================================
# Run Application
# ============================================================
if __name__ == "__main__":
    print("\n" + "="*60)
    print("🚀 BUSINESS DASHBOARD - Starting Flask Application")
    print("="*60)
    print(f"📊 Spreadsheet: {config.SPREADSHEET_ID or '(GOOGLE_SHEET_ID not set)'}")
    print(f"📒 Ledger tab: {config.LEDGER_TAB}")
    print("="*60 + "\n")

    create_app().run(host='0.0.0.0', debug=True, port=5000)
