# sales_analytics.py
"""
Sales invoice analytics over the frame from data_loader.load_sales():
filters, per-dimension statistics, overview KPIs, monthly trend, top
customers / products and the inactive-customer report.
"""
import logging

import numpy as np
import pandas as pd

from biz_dashboard import config
from biz_dashboard.errors import ValidationError

logger = logging.getLogger(__name__)

DIMENSIONS = ('area', 'merchandiser', 'sales_rep')
TOP_BY = {
    'customer': 'customer_name',
    'product': 'product',
}


def _today(today):
    return pd.Timestamp(today).normalize() if today is not None else pd.Timestamp.now().normalize()


def _month_keys(sales):
    return sales['parsed_date'].dt.strftime('%Y-%m')


# ============================================================
# FILTERS
# ============================================================

def filter_sales(sales, year=None, month=None, date_from=None, date_to=None,
                 area=None, merchandiser=None, sales_rep=None):
    """
    Narrows the sales lines. Any date filter drops rows whose date could
    not be parsed. date_to is inclusive.
    """
    dates = sales['parsed_date']
    mask = pd.Series(True, index=sales.index)

    if year:
        mask &= dates.dt.year == int(year)
    if month:
        mask &= dates.dt.month == int(month)
    if date_from:
        mask &= dates >= pd.Timestamp(date_from).normalize()
    if date_to:
        mask &= dates <= pd.Timestamp(date_to).normalize()

    for col, value in (('area', area), ('merchandiser', merchandiser), ('sales_rep', sales_rep)):
        if value:
            mask &= sales[col].str.lower() == value.strip().lower()

    return sales[mask]


# ============================================================
# STATISTICS
# ============================================================

def _average_monthly_growth(monthly_amounts):
    if len(monthly_amounts) < 2:
        return 0.0
    return float(np.diff(monthly_amounts.values).mean())


def dimension_statistics(sales, dimension):
    """Per area / merchandiser / sales rep totals, monthly averages and share of total."""
    if dimension not in DIMENSIONS:
        raise ValidationError("Unknown dimension", dimension)

    df = sales[sales[dimension] != '']
    if df.empty:
        return []

    df = df.assign(month_key=_month_keys(df))
    grand_total = df['amount'].sum()

    results = []
    for value, group in df.groupby(dimension):
        total_amount = group['amount'].sum()
        monthly = group.dropna(subset=['month_key']).groupby('month_key')['amount'].sum().sort_index()
        months = max(len(monthly), 1)
        results.append({
            dimension: value,
            'total_amount': float(total_amount),
            'total_qty': float(group['qty'].sum()),
            'line_count': int(len(group)),
            'average_monthly': float(total_amount / months),
            'average_monthly_growth': _average_monthly_growth(monthly),
            'percentage': float(total_amount / grand_total * 100) if grand_total else 0.0,
        })
    return sorted(results, key=lambda r: r['total_amount'], reverse=True)


def overview(sales):
    total_amount = float(sales['amount'].sum())
    invoices = sales['invoice_number'].nunique()
    cost = (sales['product_cost'] * sales['qty']).sum()
    return {
        'total_amount': total_amount,
        'total_qty': float(sales['qty'].sum()),
        'invoice_count': int(invoices),
        'customer_count': int(sales['customer_id'].nunique()),
        'product_count': int(sales['product'].nunique()),
        'average_invoice_value': total_amount / invoices if invoices else 0.0,
        'gross_profit': float(total_amount - cost),
    }


def monthly_trend(sales):
    df = sales[sales['parsed_date'].notna()]
    if df.empty:
        return []
    df = df.assign(month_key=_month_keys(df))
    trend = df.groupby('month_key').agg(
        amount=('amount', 'sum'),
        qty=('qty', 'sum'),
        invoice_count=('invoice_number', 'nunique'),
    ).reset_index()
    return trend.to_dict(orient='records')


def top_n(sales, by='customer', n=10):
    if by not in TOP_BY:
        raise ValidationError("Unknown ranking", by)
    col = TOP_BY[by]
    if sales.empty:
        return []
    ranked = sales.groupby(col).agg(
        amount=('amount', 'sum'),
        qty=('qty', 'sum'),
        invoice_count=('invoice_number', 'nunique'),
    ).reset_index().sort_values('amount', ascending=False, kind='stable')
    return ranked.head(int(n)).rename(columns={col: 'name'}).to_dict(orient='records')


# ============================================================
# INACTIVE CUSTOMERS
# ============================================================

def inactivity_status(days):
    for status, lower in config.INACTIVE_STATUSES:
        if days >= lower:
            return status
    return None


def inactive_customers(sales, exceptions=frozenset(), today=None):
    """
    Customers whose last SAL invoice is at least 10 days old, longest
    silence first.
    """
    today = _today(today)
    df = sales[sales['invoice_number'].str.upper().str.startswith('SAL')]
    df = df.assign(customer_key=np.where(df['customer_id'] != '', df['customer_id'], df['customer_name']))

    results = []
    for key, group in df.groupby('customer_key', sort=False):
        if key in exceptions:
            continue
        dated = group[group['parsed_date'].notna()]
        if dated.empty:
            continue

        last_date = dated['parsed_date'].max()
        days = int((today - last_date).days)
        if days < config.INACTIVE_MIN_DAYS:
            continue

        total = float(group['amount'].sum())
        orders = int(group['invoice_number'].nunique())
        results.append({
            'customer_id': group['customer_id'].iloc[0],
            'customer_name': group['customer_name'].iloc[0],
            'area': group['area'].iloc[0],
            'sales_rep': group['sales_rep'].iloc[0],
            'last_purchase_date': last_date.strftime('%Y-%m-%d'),
            'days_since_last_purchase': days,
            'total_amount': total,
            'order_count': orders,
            'average_order_value': total / orders if orders else 0.0,
            'status': inactivity_status(days),
        })

    logger.info("💤 %d inactive customers as of %s", len(results), today.date())
    return sorted(results, key=lambda r: r['days_since_last_purchase'], reverse=True)


def filter_inactive(customers, min_days=None, min_amount=None, status=None, search=''):
    if min_days is not None:
        customers = [c for c in customers if c['days_since_last_purchase'] >= min_days]
    if min_amount is not None:
        customers = [c for c in customers if c['total_amount'] >= min_amount]
    if status and status != 'ALL':
        customers = [c for c in customers if c['status'] == status]
    if search and search.strip():
        query = search.strip().lower()
        customers = [
            c for c in customers
            if query in c['customer_name'].lower() or query in str(c['customer_id']).lower()
        ]
    return customers
