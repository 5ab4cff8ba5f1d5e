# validator.py
import re
from datetime import datetime

import pandas as pd

MONTH_ABBREVIATIONS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}
MONTH_NAMES_BY_NUMBER = {num: name for name, num in MONTH_ABBREVIATIONS.items()}

_MONTH_TOKEN_RE = re.compile(r'^([A-Z]{3})[-/]?(\d{2}|\d{4})$')
_MONTH_KEY_RE = re.compile(r'^\d{4}-\d{2}$')
_YEAR_FIRST_DATE_RE = re.compile(r'^\d{4}[-/]\d{1,2}[-/]\d{1,2}')
_YEAR_RE = re.compile(r'\d{4}')


def _is_missing(value):
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_and_trim_string(value):
    """
    Cleans string values: strips whitespace, converts to string, handles None/NaN.
    Returns None for missing values, cleaned string otherwise.
    """
    if _is_missing(value):
        return None
    return str(value).strip()


def clean_numeric(value, default=None):
    """
    Cleans numeric cells coming back from the sheet.
    Handles thousands separators ("1,234.50") and blanks.
    """
    if _is_missing(value):
        return default
    text = str(value).replace(',', '').strip()
    if not text:
        return default
    try:
        return float(text)
    except (ValueError, TypeError):
        return default


def clean_and_round_integer(value, default=None):
    """Cleans and rounds a numeric cell to int (order quantities, sequence numbers)."""
    number = clean_numeric(value)
    if number is None:
        return default
    return int(round(number))


def parse_date(value):
    """
    Parses the date formats found in the sheets and returns a pandas Timestamp.
    Handles:
    - Already parsed datetime objects
    - Year-first and month-name strings ("2025-03-01", "2025/03/01", "Mar 1, 2025")
    - Slash/dash dates; month first unless the first part is > 12
      or the last part is > 31, in which case day/month/year
    - None/NaN/blank values
    """
    if _is_missing(value):
        return None

    if isinstance(value, (datetime, pd.Timestamp)):
        return pd.Timestamp(value).normalize()

    text = str(value).strip()
    if not text:
        return None

    parts = re.split(r'[/\-]', text)
    if len(parts) == 3 and all(p.strip().isdigit() for p in parts) and not _YEAR_FIRST_DATE_RE.match(text):
        p1, p2, p3 = (int(p) for p in parts)
        year = p3 + 2000 if p3 < 100 else p3
        if p1 <= 12:
            try:
                return pd.Timestamp(year=year, month=p1, day=p2)
            except ValueError:
                pass
        if p1 > 12 or p3 > 31:
            try:
                return pd.Timestamp(year=year, month=p2, day=p1)
            except ValueError:
                return None
        return None

    try:
        parsed_date = pd.to_datetime(text, errors='coerce')
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed_date):
        return None
    if getattr(parsed_date, 'tzinfo', None) is not None:
        parsed_date = parsed_date.tz_localize(None)
    return parsed_date.normalize()


def extract_year(value):
    """Year as a string from a date cell; falls back to the first 4-digit run in the text."""
    parsed = parse_date(value)
    if parsed is not None:
        return str(parsed.year)
    if _is_missing(value):
        return None
    match = _YEAR_RE.search(str(value))
    return match.group(0) if match else None


def normalize_name(name):
    if _is_missing(name):
        return ''
    return re.sub(r'\s+', ' ', str(name).strip().lower())


# ============================================================
# MONTH TOKENS (JAN25 <-> 2025-01)
# ============================================================

def normalize_month_token(token):
    """'JAN25', 'JAN2025', 'JAN-25', 'JAN/25' -> '2025-01'."""
    if _is_missing(token):
        return None
    cleaned = str(token).strip().upper()
    match = _MONTH_TOKEN_RE.match(cleaned)
    if not match:
        return None
    month = MONTH_ABBREVIATIONS.get(match.group(1))
    if not month:
        return None
    year = int(match.group(2))
    if year < 100:
        year += 2000
    return f"{year}-{month:02d}"


def normalize_month_key(token, fallback_year):
    """Accepts YYYY-MM, any month token, or a bare month name (uses fallback_year)."""
    if _is_missing(token):
        return None
    cleaned = str(token).strip()
    if _MONTH_KEY_RE.match(cleaned):
        return cleaned if 1 <= int(cleaned[5:]) <= 12 else None
    return normalize_month_token(cleaned) or normalize_month_token(f"{cleaned}{fallback_year}")


def format_month_token(key):
    """'2025-09' -> 'SEP25'."""
    year_str, month_str = key.split('-')
    month_name = MONTH_NAMES_BY_NUMBER.get(int(month_str), month_str)
    return f"{month_name}{year_str[-2:]}"


def split_month_tokens(raw, fallback_year):
    """Splits a reconciliation cell ("JAN25, FEB25; MAR25") into normalised keys."""
    if _is_missing(raw):
        return []
    keys = []
    for token in re.split(r'[,;\s]+', str(raw)):
        key = normalize_month_key(token, fallback_year) if token else None
        if key:
            keys.append(key)
    return keys
