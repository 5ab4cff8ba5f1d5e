import pandas as pd
import pytest

from biz_dashboard import scoring

TODAY = pd.Timestamp('2025-06-30')


def make_customer(**overrides):
    customer = {
        'customer_name': 'Alpha Store',
        'net_debt': 1000.0,
        'total_debit': 10000.0,
        'total_credit': 9000.0,
        'payments_count_3m': 3,
        'sales_count_3m': 3,
        'payments_3m': 12000.0,
        'sales_3m': 12000.0,
        'last_payment_date': TODAY - pd.Timedelta(days=5),
        'last_sales_date': TODAY - pd.Timedelta(days=5),
    }
    customer.update(overrides)
    return customer


def test_healthy_customer_is_good():
    assert scoring.debt_rating(make_customer(), today=TODAY) == 'Good'


def test_closed_customer_is_always_bad():
    closed = {'alpha store'}
    assert scoring.debt_rating(make_customer(customer_name=' Alpha  Store'), closed, TODAY) == 'Bad'


def test_credit_balance_is_good():
    customer = make_customer(net_debt=-5, payments_count_3m=0, sales_count_3m=0)
    assert scoring.debt_rating(customer, today=TODAY) == 'Good'


def test_dormant_debtor_is_bad():
    customer = make_customer(payments_count_3m=0, sales_count_3m=0)
    assert scoring.debt_rating(customer, today=TODAY) == 'Bad'


def test_returns_without_payments_is_bad():
    customer = make_customer(sales_3m=-100, payments_count_3m=0)
    assert scoring.debt_rating(customer, today=TODAY) == 'Bad'


def test_middling_customer_is_medium():
    customer = make_customer(
        net_debt=15000,                                      # 1
        total_debit=20000, total_credit=11000,               # 0.55 -> 1
        last_payment_date=TODAY - pd.Timedelta(days=60),     # 1
        payments_count_3m=1,                                 # 1
        last_sales_date=TODAY - pd.Timedelta(days=120),      # 0
        payments_3m=3000,                                    # 1
        sales_3m=500,                                        # 0
        sales_count_3m=1,                                    # 1
    )
    assert scoring.debt_rating(customer, today=TODAY) == 'Medium'


@pytest.mark.parametrize('net_debt, points', [(0, 2), (5000, 2), (5001, 1), (20000, 1), (20001, 0)])
def test_score_net_debt(net_debt, points):
    assert scoring.score_net_debt(net_debt) == points


def test_score_recency_without_date():
    assert scoring.score_recency(None, TODAY) == 0
    assert scoring.score_recency(pd.NaT, TODAY) == 0
    assert scoring.score_recency(TODAY - pd.Timedelta(days=30), TODAY) == 2
    assert scoring.score_recency(TODAY - pd.Timedelta(days=90), TODAY) == 1


def test_rate_customers_and_counts():
    analysis = pd.DataFrame([
        make_customer(),
        make_customer(customer_name='Beta Mart', payments_count_3m=0, sales_count_3m=0),
    ])
    rated = scoring.rate_customers(analysis, today=TODAY)
    assert list(rated['rating']) == ['Good', 'Bad']
    assert scoring.rating_counts(rated['rating']) == {'good': 1, 'medium': 0, 'bad': 1}


def test_rate_empty_frame():
    rated = scoring.rate_customers(pd.DataFrame(columns=['customer_name']), today=TODAY)
    assert 'rating' in rated.columns
    assert rated.empty
