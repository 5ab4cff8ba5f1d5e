"""
Customer Debt Rating

Rates every ledger customer Good / Medium / Bad from eight 0-2 point scores
over balance, collection and the last 90 days of activity. Closed customers
are always Bad; customers we owe money to are always Good.

Input is one row of ledger.customer_analysis() (dict or Series).
"""

import pandas as pd

from biz_dashboard import validator

# ============================================================
# SCORING CONFIGURATION
# ============================================================

NET_DEBT_LOW = 5000
NET_DEBT_HIGH = 20000

COLLECTION_GOOD = 0.8
COLLECTION_FAIR = 0.5

DAYS_RECENT = 30
DAYS_STALE = 90

VALUE_HIGH = 10000
VALUE_LOW = 2000

GOOD_THRESHOLD = 11
MEDIUM_THRESHOLD = 6

RATINGS = ('Good', 'Medium', 'Bad')


# ============================================================
# MAIN RATING FUNCTION
# ============================================================

def debt_rating(customer, closed_names=frozenset(), today=None):
    today = _today(today)

    if validator.normalize_name(customer['customer_name']) in closed_names:
        return 'Bad'

    net_debt = customer['net_debt']
    if net_debt < 0:
        return 'Good'

    pay_count = customer.get('payments_count_3m', 0) or 0
    sales_count = customer.get('sales_count_3m', 0) or 0
    payments_90d = customer.get('payments_3m', 0) or 0
    sales_90d = customer.get('sales_3m', 0) or 0

    # Returns outweigh sales with nothing paid, or dormant with money owed
    if (sales_90d < 0 and pay_count == 0) or (pay_count == 0 and sales_count == 0 and net_debt > 0):
        return 'Bad'

    total_debit = customer['total_debit']
    collection_rate = customer['total_credit'] / total_debit if total_debit > 0 else 0

    total_score = (
        score_net_debt(net_debt)
        + _tiered(collection_rate, COLLECTION_GOOD, COLLECTION_FAIR)
        + score_recency(customer.get('last_payment_date'), today)
        + score_count(pay_count)
        + score_recency(customer.get('last_sales_date'), today)
        + _tiered(payments_90d, VALUE_HIGH, VALUE_LOW)
        + _tiered(sales_90d, VALUE_HIGH, VALUE_LOW)
        + score_count(sales_count)
    )

    if total_score >= GOOD_THRESHOLD:
        return 'Good'
    if total_score >= MEDIUM_THRESHOLD:
        return 'Medium'
    return 'Bad'


# ============================================================
# SCORING HELPER FUNCTIONS
# ============================================================

def _today(today):
    return pd.Timestamp(today).normalize() if today is not None else pd.Timestamp.now().normalize()


def _tiered(value, high, low):
    if value >= high:
        return 2
    if value >= low:
        return 1
    return 0


def score_net_debt(net_debt):
    if net_debt <= NET_DEBT_LOW:
        return 2
    if net_debt <= NET_DEBT_HIGH:
        return 1
    return 0


def score_recency(last_date, today):
    """2 points within 30 days, 1 within 90, else 0 (no date -> 0)."""
    if last_date is None or pd.isna(last_date):
        return 0
    days = (today - pd.Timestamp(last_date).normalize()).days
    if days <= DAYS_RECENT:
        return 2
    if days <= DAYS_STALE:
        return 1
    return 0


def score_count(count):
    if count >= 2:
        return 2
    if count == 1:
        return 1
    return 0


def rate_customers(analysis, closed_names=frozenset(), today=None):
    """Adds a 'rating' column to a customer_analysis() frame."""
    analysis = analysis.copy()
    if analysis.empty:
        analysis['rating'] = pd.Series(dtype=object)
        return analysis
    analysis['rating'] = analysis.apply(lambda row: debt_rating(row, closed_names, today), axis=1)
    return analysis


def rating_counts(ratings):
    """{'good': n, 'medium': n, 'bad': n} from an iterable of ratings."""
    counts = {rating.lower(): 0 for rating in RATINGS}
    for rating in ratings:
        counts[rating.lower()] += 1
    return counts
