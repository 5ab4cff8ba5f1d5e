# ledger.py
"""
Debit ledger analysis: per-customer balances, matching-group reconciliation,
open items, aging buckets, period / sales-rep rollups and the payment tracker.

Every function takes the frame returned by data_loader.load_ledger().
"""
import logging
import math

import numpy as np
import pandas as pd

from biz_dashboard import config, scoring, validator
from biz_dashboard.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TOL = config.BALANCE_TOLERANCE

DISCOUNT_PREFIXES = ('BIL', 'JV')
NON_PAYMENT_PREFIXES = ('SAL', 'RSAL', 'BIL', 'JV', 'OB')
OPEN_MATCH_TYPES = ('Payment', 'Discount', 'Return', 'Sales', 'OB')


# ============================================================
# TRANSACTION CLASSIFICATION
# ============================================================

def transaction_type(number, debit=0.0, credit=0.0):
    num = (number or '').upper()
    if num.startswith('SAL'):
        return 'Sale'
    if num.startswith('RSAL'):
        return 'Return'
    if num.startswith('OB'):
        return 'Opening Balance'
    if num.startswith(DISCOUNT_PREFIXES):
        return 'Discount'
    if (credit or 0) > TOL:
        return 'Payment'
    return 'Invoice/Txn'


def is_payment(number, credit=0.0):
    num = (number or '').upper()
    if num.startswith('BNK'):
        return True
    if (credit or 0) <= TOL:
        return False
    return not num.startswith(NON_PAYMENT_PREFIXES)


def _numbers(ledger):
    return ledger['number'].fillna('').astype(str).str.upper()


def _today(today):
    return pd.Timestamp(today).normalize() if today is not None else pd.Timestamp.now().normalize()


# ============================================================
# CUSTOMER SUMMARY
# ============================================================

SUMMARY_COLUMNS = ['customer_name', 'total_debit', 'total_credit', 'net_debt',
                   'transaction_count', 'has_open_matchings']


def _open_matching_customers(ledger):
    matched = ledger[ledger['matching'] != '']
    if matched.empty:
        return set()
    group_totals = (matched['debit'] - matched['credit']).groupby(
        [matched['customer_name'], matched['matching']]).sum()
    open_groups = group_totals[group_totals.abs() > TOL]
    return set(open_groups.index.get_level_values(0))


def customer_summary(ledger):
    """Totals per customer, sorted by net debt (largest debtor first)."""
    if ledger.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    summary = ledger.groupby('customer_name', sort=False).agg(
        total_debit=('debit', 'sum'),
        total_credit=('credit', 'sum'),
        transaction_count=('debit', 'size'),
    ).reset_index()
    summary['net_debt'] = summary['total_debit'] - summary['total_credit']
    summary['has_open_matchings'] = summary['customer_name'].isin(_open_matching_customers(ledger))

    summary = summary.sort_values('net_debt', ascending=False, kind='stable').reset_index(drop=True)
    return summary[SUMMARY_COLUMNS]


def filter_customers(summary, search='', open_only=False):
    if open_only:
        summary = summary[summary['has_open_matchings']]
    if search and search.strip():
        query = search.strip().lower()
        summary = summary[summary['customer_name'].str.lower().str.contains(query, regex=False)]
    return summary


# ============================================================
# MATCHING RECONCILIATION
# ============================================================

def attach_residuals(ledger):
    """
    Adds 'net' (debit - credit) and 'residual'.

    Rows sharing a customer + matching id form a group; a group whose net
    does not close to zero carries its remaining amount on exactly one row,
    the first row with the largest debit. Every other row gets NaN.
    """
    df = ledger.copy()
    df['net'] = df['debit'] - df['credit']
    df['residual'] = np.nan
    matched = df[df['matching'] != '']
    if matched.empty:
        return df

    keys = [matched['customer_name'], matched['matching']]
    totals = matched['net'].groupby(keys).sum()
    targets = matched['debit'].groupby(keys).idxmax()

    for key, row_label in targets.items():
        total = totals[key]
        if abs(total) > TOL:
            df.at[row_label, 'residual'] = total
    return df


def customer_transactions(ledger, customer_name):
    """One customer's rows in sheet order with type, residual and running balance."""
    rows = ledger[ledger['customer_name'].str.lower() == (customer_name or '').strip().lower()]
    if rows.empty:
        raise NotFoundError('Customer not found', customer_name)

    rows = attach_residuals(rows)
    rows['running_balance'] = rows['net'].cumsum()

    records = []
    for _, row in rows.iterrows():
        records.append({
            'date': row['date'],
            'due_date': row['due_date'],
            'number': row['number'],
            'type': transaction_type(row['number'], row['debit'], row['credit']),
            'sales_rep': row['sales_rep'],
            'debit': row['debit'],
            'credit': row['credit'],
            'net': row['net'],
            'matching': row['matching'],
            'residual': None if pd.isna(row['residual']) else row['residual'],
            'running_balance': row['running_balance'],
        })
    return records


def _open_match_type(number, matched, adjusted_credit):
    num = (number or '').upper()
    if num.startswith('OB'):
        return 'OB'
    if num.startswith('SAL'):
        # Fully open sales are ordinary receivables, not partially closed items
        return 'Sales' if matched else None
    if num.startswith('RSAL'):
        return 'Return'
    if num.startswith(DISCOUNT_PREFIXES):
        return 'Discount'
    if adjusted_credit > TOL:
        return 'Payment'
    return None


def open_matches(ledger):
    """
    Items still open after matching: unmatched rows that do not net to zero,
    and matching groups with a residual. Newest first.
    """
    columns = ['customer_name', 'date', 'number', 'debit', 'credit',
               'remaining_amount', 'type', 'matching']
    if ledger.empty:
        return pd.DataFrame(columns=columns)

    df = attach_residuals(ledger)
    unmatched = df['matching'] == ''
    is_open = (unmatched & (df['net'].abs() > TOL)) | (~unmatched & df['residual'].notna())
    df = df[is_open & df['parsed_date'].notna()].copy()
    if df.empty:
        return pd.DataFrame(columns=columns)

    df['remaining_amount'] = np.where(df['matching'] == '', df['net'], df['residual'])
    df['credit'] = df['debit'] - df['remaining_amount']
    df['type'] = [
        _open_match_type(number, matching != '', credit)
        for number, matching, credit in zip(df['number'], df['matching'], df['credit'])
    ]
    df = df[df['type'].notna() & (df['remaining_amount'].abs() > TOL)].copy()

    df = df.sort_values('parsed_date', ascending=False, kind='stable')
    df['date'] = df['parsed_date'].dt.strftime('%Y-%m-%d')
    logger.info("🔗 %d open matching items across %d customers",
                len(df), df['customer_name'].nunique())
    return df[columns].reset_index(drop=True)


def filter_open_matches(items, item_type='ALL', date_from=None, date_to=None, search=''):
    if item_type and item_type != 'ALL':
        items = items[items['type'] == item_type]

    if date_from or date_to:
        dates = pd.to_datetime(items['date'])
        if date_from:
            items = items[dates >= pd.Timestamp(date_from).normalize()]
            dates = dates[items.index]
        if date_to:
            items = items[dates <= pd.Timestamp(date_to).normalize()]

    if search and search.strip():
        query = search.strip().lower()
        haystack = (items['customer_name'] + ' ' + items['number'] + ' '
                    + items['date'] + ' ' + items['matching'].fillna(''))
        for col in ('debit', 'credit', 'remaining_amount'):
            haystack = haystack + ' ' + items[col].map(_amount_text)
        items = items[haystack.str.lower().str.contains(query, regex=False)]
    return items


def _amount_text(value):
    """400.0 -> '400', 12.5 -> '12.5'."""
    return f"{value:.2f}".rstrip('0').rstrip('.')


def paginate(records, page=0, page_size=config.DEFAULT_PAGE_SIZE):
    """Slices a list of records; page is 0-based."""
    page_size = max(int(page_size or config.DEFAULT_PAGE_SIZE), 1)
    total = len(records)
    page_count = max(math.ceil(total / page_size), 1)
    page = min(max(int(page or 0), 0), page_count - 1)
    start = page * page_size
    return {
        'items': records[start:start + page_size],
        'page': page,
        'page_size': page_size,
        'page_count': page_count,
        'total': total,
    }


# ============================================================
# AGING
# ============================================================

AGING_KEYS = [key for key, _ in config.AGING_BUCKETS]


def aging_bucket(days_overdue):
    for key, upper in config.AGING_BUCKETS:
        if upper is None or days_overdue <= upper:
            return key
    return AGING_KEYS[-1]


def _days_overdue(due, today):
    seconds = (today - pd.Timestamp(due).normalize()).total_seconds()
    return math.ceil(seconds / 86400)


def aging(ledger, today=None):
    """
    Spreads each debtor's net debt over its debit rows, newest due date
    first, and buckets each slice by days overdue.
    """
    today = _today(today)
    columns = ['customer_name'] + AGING_KEYS + ['total']
    if ledger.empty:
        return pd.DataFrame(columns=columns)

    epoch = pd.Timestamp(0)
    summaries = []
    for customer_name, rows in ledger.groupby('customer_name', sort=False):
        net_debt = rows['debit'].sum() - rows['credit'].sum()
        summary = {'customer_name': customer_name, **{key: 0.0 for key in AGING_KEYS}, 'total': net_debt}

        if net_debt > TOL:
            debits = rows[rows['debit'] > 0].copy()
            debits['sort_date'] = debits['parsed_due_date'].fillna(debits['parsed_date']).fillna(epoch)
            debits = debits.sort_values('sort_date', ascending=False, kind='stable')

            remaining = net_debt
            for _, inv in debits.iterrows():
                if remaining <= 0:
                    break
                allocated = min(inv['debit'], remaining)
                due = inv['parsed_due_date']
                if pd.isna(due):
                    due = inv['parsed_date'] if pd.notna(inv['parsed_date']) else today
                summary[aging_bucket(_days_overdue(due, today))] += allocated
                remaining -= allocated

        summaries.append(summary)

    result = pd.DataFrame(summaries, columns=columns)
    return result.sort_values('total', ascending=False, kind='stable').reset_index(drop=True)


def aging_totals(aging_df):
    return {key: float(aging_df[key].sum()) for key in AGING_KEYS + ['total']}


# ============================================================
# CUSTOMER ANALYSIS (inputs for the debt rating)
# ============================================================

ANALYSIS_COLUMNS = [
    'customer_name', 'total_debit', 'total_credit', 'net_debt', 'net_sales',
    'transaction_count', 'sales_reps', 'last_payment_date', 'last_payment_amount',
    'last_payment_matching', 'last_sales_date', 'last_sales_amount',
    'sales_3m', 'sales_count_3m', 'payments_3m', 'payments_count_3m',
]


def _flag_rows(ledger, today):
    df = ledger.copy()
    numbers = _numbers(df)
    df['is_sale'] = numbers.str.startswith('SAL')
    df['is_return'] = numbers.str.startswith('RSAL')
    df['is_payment'] = [is_payment(n, c) for n, c in zip(df['number'], df['credit'])]
    since = today - pd.Timedelta(days=config.RECENT_WINDOW_DAYS)
    df['in_window'] = df['parsed_date'].notna() & (df['parsed_date'] >= since) & (df['parsed_date'] <= today)
    return df


def _last_row(rows, mask):
    candidates = rows[mask & rows['parsed_date'].notna()]
    if candidates.empty:
        return None
    return candidates.loc[candidates['parsed_date'].idxmax()]


def customer_analysis(ledger, today=None):
    """Per customer totals, last payment / sale, and the 90-day activity window."""
    today = _today(today)
    if ledger.empty:
        return pd.DataFrame(columns=ANALYSIS_COLUMNS)

    df = _flag_rows(ledger, today)
    records = []
    for customer_name, rows in df.groupby('customer_name', sort=False):
        total_debit = rows['debit'].sum()
        total_credit = rows['credit'].sum()

        last_payment = _last_row(rows, rows['is_payment'] & (rows['credit'] > TOL))
        last_sale = _last_row(rows, rows['is_sale'] & (rows['debit'] > 0))

        recent_sales = rows[rows['is_sale'] & rows['in_window']]
        recent_payments = rows[rows['is_payment'] & rows['in_window']]

        records.append({
            'customer_name': customer_name,
            'total_debit': total_debit,
            'total_credit': total_credit,
            'net_debt': total_debit - total_credit,
            'net_sales': rows.loc[rows['is_sale'], 'debit'].sum() - rows.loc[rows['is_return'], 'credit'].sum(),
            'transaction_count': len(rows),
            'sales_reps': sorted({rep for rep in rows['sales_rep'] if rep}),
            'last_payment_date': last_payment['parsed_date'] if last_payment is not None else None,
            'last_payment_amount': (last_payment['credit'] - last_payment['debit']) if last_payment is not None else None,
            'last_payment_matching': (last_payment['matching'] or 'UNMATCHED') if last_payment is not None else None,
            'last_sales_date': last_sale['parsed_date'] if last_sale is not None else None,
            'last_sales_amount': last_sale['debit'] if last_sale is not None else None,
            'sales_3m': recent_sales['debit'].sum(),
            'sales_count_3m': len(recent_sales),
            'payments_3m': (recent_payments['credit'] - recent_payments['debit']).sum(),
            'payments_count_3m': int((recent_payments['credit'] > TOL).sum() - (recent_payments['debit'] > TOL).sum()),
        })

    return pd.DataFrame(records, columns=ANALYSIS_COLUMNS)


# ============================================================
# ROLLUPS
# ============================================================

def _totals(frame):
    total_debit = frame['debit'].sum()
    total_credit = frame['credit'].sum()
    return {
        'total_debit': total_debit,
        'total_credit': total_credit,
        'net_debt': total_debit - total_credit,
        'transaction_count': len(frame),
        'collection_rate': (total_credit / total_debit * 100) if total_debit > 0 else 0.0,
    }


def _year_keys(ledger):
    parsed_years = ledger['parsed_date'].dt.year
    return [
        str(int(year)) if pd.notna(year) else validator.extract_year(raw)
        for year, raw in zip(parsed_years, ledger['date'])
    ]


def year_rollup(ledger, closed_names=frozenset(), today=None):
    """
    Debtor customers' activity per year with Good/Medium/Bad counts of the
    customers who transacted in that year.
    """
    today = _today(today)
    if ledger.empty:
        return []

    rated = scoring.rate_customers(customer_analysis(ledger, today), closed_names, today)
    ratings = dict(zip(rated['customer_name'], rated['rating']))
    debtors = set(rated.loc[rated['net_debt'] > TOL, 'customer_name'])

    df = ledger.copy()
    df['year'] = _year_keys(df)
    df = df[df['year'].notna()]

    results = []
    for year, frame in df[df['customer_name'].isin(debtors)].groupby('year'):
        active = df.loc[df['year'] == year, 'customer_name'].unique()
        results.append({
            'year': year,
            **_totals(frame),
            **{f"{k}_customers_count": v for k, v in scoring.rating_counts(ratings[c] for c in active).items()},
        })
    return sorted(results, key=lambda r: r['year'])


def month_rollup(ledger):
    """All ledger activity per YYYY-MM, oldest first."""
    df = ledger[ledger['parsed_date'].notna()].copy()
    if df.empty:
        return []
    df['month_key'] = df['parsed_date'].dt.strftime('%Y-%m')

    results = []
    for month_key, frame in df.groupby('month_key'):
        year, month = month_key.split('-')
        results.append({'month_key': month_key, 'year': year, 'month': str(int(month)), **_totals(frame)})
    return results


def sales_rep_rollup(ledger, closed_names=frozenset(), today=None):
    """Per sales rep totals, distinct customers and rating counts, largest net debt first."""
    today = _today(today)
    if ledger.empty:
        return []

    rated = scoring.rate_customers(customer_analysis(ledger, today), closed_names, today)

    results = []
    for rep, frame in ledger.groupby('sales_rep'):
        rep_customers = rated[rated['sales_reps'].apply(lambda reps: rep in reps)]
        results.append({
            'sales_rep': rep,
            **_totals(frame),
            'customer_count': frame['customer_name'].nunique(),
            **{f"{k}_customers_count": v for k, v in scoring.rating_counts(rep_customers['rating']).items()},
        })
    return sorted(results, key=lambda r: r['net_debt'], reverse=True)


# ============================================================
# PAYMENT TRACKER
# ============================================================

PAYMENT_COLUMNS = ['date', 'number', 'customer_name', 'sales_rep', 'matching',
                   'debit', 'credit', 'amount', 'matched_opening_balance']


def _opening_balance_matchings(ledger):
    opening = ledger[_numbers(ledger).str.startswith('OB') & (ledger['matching'] != '')]
    return {matching.lower() for matching in opening['matching']}


def payments(ledger, date_from=None, date_to=None, sales_rep=None, search=''):
    """
    Payment rows with amount = credit - debit, newest first. A payment sharing
    a matching id with an opening balance is flagged. Date filters drop
    undated rows; date_to is inclusive.
    """
    if ledger.empty:
        return pd.DataFrame(columns=PAYMENT_COLUMNS + ['parsed_date'])

    mask = pd.Series([is_payment(n, c) for n, c in zip(ledger['number'], ledger['credit'])],
                     index=ledger.index)
    dates = ledger['parsed_date']
    if date_from is not None:
        mask &= dates >= pd.Timestamp(date_from).normalize()
    if date_to is not None:
        mask &= dates <= pd.Timestamp(date_to).normalize()
    if sales_rep:
        mask &= ledger['sales_rep'].str.strip().str.lower() == sales_rep.strip().lower()
    if search and search.strip():
        query = search.strip().lower()
        mask &= (ledger['customer_name'].str.lower().str.contains(query, regex=False)
                 | ledger['number'].str.lower().str.contains(query, regex=False))

    df = ledger[mask].copy()
    df['amount'] = df['credit'] - df['debit']
    df['matched_opening_balance'] = df['matching'].str.lower().isin(_opening_balance_matchings(ledger))
    df = df.sort_values('parsed_date', ascending=False, kind='stable', na_position='last')
    df['date'] = df['parsed_date'].dt.strftime('%Y-%m-%d').fillna(df['date'])

    logger.info("💰 %d payments totalling %.2f", len(df), df['amount'].sum())
    return df[PAYMENT_COLUMNS + ['parsed_date']].reset_index(drop=True)


def payments_by_customer(pays):
    """Totals per customer (names grouped case-insensitively), largest first."""
    if pays.empty:
        return []
    df = pays.assign(key=pays['customer_name'].str.strip().str.lower(), counted=pays['credit'] > TOL)
    grouped = df.groupby('key', sort=False).agg(
        customer_name=('customer_name', 'first'),
        total_payments=('amount', 'sum'),
        payment_count=('counted', 'sum'),
    ).reset_index(drop=True)
    grouped = grouped.sort_values('total_payments', ascending=False, kind='stable')
    return grouped.to_dict(orient='records')


def _period_key(date, period):
    if period == 'daily':
        return date.strftime('%Y-%m-%d')
    if period == 'weekly':
        return f"{date.year}-W{(date.dayofyear - 1) // 7 + 1:02d}"
    if period == 'monthly':
        return date.strftime('%Y-%m')
    return str(date.year)


def _period_label(key, period):
    if period == 'daily':
        return pd.Timestamp(key).strftime('%d/%m/%Y')
    if period == 'weekly':
        year, week = key.split('-W')
        return f"Week {week}, {year}"
    if period == 'monthly':
        return pd.Timestamp(f"{key}-01").strftime('%b %Y')
    return key


def payments_by_period(pays, period='monthly'):
    """Totals per day, week, month or year, newest first. Undated payments are skipped."""
    if period not in config.PAYMENT_PERIODS:
        raise ValidationError("Unknown period", period)
    dated = pays[pays['parsed_date'].notna()]
    if dated.empty:
        return []

    df = dated.assign(
        period_key=[_period_key(d, period) for d in dated['parsed_date']],
        counted=dated['credit'] > TOL,
    )
    grouped = df.groupby('period_key').agg(
        total_payments=('amount', 'sum'),
        payment_count=('counted', 'sum'),
    ).reset_index().sort_values('period_key', ascending=False)
    grouped['period'] = [_period_label(key, period) for key in grouped['period_key']]
    return grouped[['period', 'period_key', 'total_payments', 'payment_count']].to_dict(orient='records')
