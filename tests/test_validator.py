import math
from datetime import datetime

import pandas as pd
import pytest

from biz_dashboard import validator


@pytest.mark.parametrize('value, expected', [
    ('2025-03-01', '2025-03-01'),
    ('2025/03/15', '2025-03-15'),
    ('03/15/2025', '2025-03-15'),
    ('15/03/2025', '2025-03-15'),
    ('3-4-25', '2025-03-04'),
    ('Mar 1, 2025', '2025-03-01'),
    (datetime(2025, 3, 1, 14, 30), '2025-03-01'),
])
def test_parse_date_formats(value, expected):
    assert validator.parse_date(value) == pd.Timestamp(expected)


@pytest.mark.parametrize('value', [None, '', '   ', 'not a date', '31/31/2025', float('nan')])
def test_parse_date_rejects_garbage(value):
    assert validator.parse_date(value) is None


def test_clean_numeric_handles_separators_and_blanks():
    assert validator.clean_numeric('1,234.50') == 1234.5
    assert validator.clean_numeric('') is None
    assert validator.clean_numeric('abc', default=0.0) == 0.0
    assert validator.clean_numeric(None, default=1.0) == 1.0


def test_clean_and_round_integer():
    assert validator.clean_and_round_integer('12.6') == 13
    assert validator.clean_and_round_integer('x', default=0) == 0


def test_clean_and_trim_string():
    assert validator.clean_and_trim_string('  Alpha  ') == 'Alpha'
    assert validator.clean_and_trim_string(None) is None
    assert validator.clean_and_trim_string(math.nan) is None


def test_extract_year_falls_back_to_text():
    assert validator.extract_year('2024-11-05') == '2024'
    assert validator.extract_year('FY 2023 opening') == '2023'
    assert validator.extract_year('n/a') is None


def test_normalize_name():
    assert validator.normalize_name('  Delta   Trading ') == 'delta trading'
    assert validator.normalize_name(None) == ''


@pytest.mark.parametrize('token, expected', [
    ('JAN25', '2025-01'),
    ('jan2025', '2025-01'),
    ('FEB-24', '2024-02'),
    ('SEP/25', '2025-09'),
    ('XYZ25', None),
    ('JAN', None),
])
def test_normalize_month_token(token, expected):
    assert validator.normalize_month_token(token) == expected


def test_normalize_month_key_accepts_keys_and_bare_months():
    assert validator.normalize_month_key('2025-07', 2024) == '2025-07'
    assert validator.normalize_month_key('MAR', 2025) == '2025-03'
    assert validator.normalize_month_key('MAR24', 2025) == '2024-03'


@pytest.mark.parametrize('token', ['2025-13', '2025-00', 'Smarch'])
def test_normalize_month_key_rejects_impossible_months(token):
    assert validator.normalize_month_key(token, 2025) is None


def test_format_and_split_month_tokens():
    assert validator.format_month_token('2025-09') == 'SEP25'
    assert validator.split_month_tokens('JAN25, FEB25; MAR25 junk', 2025) == ['2025-01', '2025-02', '2025-03']
    assert validator.split_month_tokens('', 2025) == []
