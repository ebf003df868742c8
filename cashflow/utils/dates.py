"""Month-key helpers.

A month key is the ``"YYYY-MM"`` string used to group transactions and to
index projected months.
"""

import re
from datetime import date

from dateutil.relativedelta import relativedelta

from cashflow.core.exceptions import InvalidParameterError

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def parse_month_key(key: str) -> date:
    """Return the first day of the month named by ``key``."""
    match = _MONTH_KEY_RE.match(key or "")
    if not match:
        raise InvalidParameterError("month", f"malformed month key {key!r}, expected YYYY-MM")
    return date(int(match.group(1)), int(match.group(2)), 1)


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    """Calendar month shift; the day is clamped to the target month's length."""
    return day + relativedelta(months=months)


def month_bounds(key: str) -> tuple[date, date]:
    """Inclusive first and last day of the month."""
    start = parse_month_key(key)
    end = start + relativedelta(months=1, days=-1)
    return start, end


def month_label(key: str) -> str:
    return parse_month_key(key).strftime("%B %Y")


def in_month(day: date, key: str) -> bool:
    start, end = month_bounds(key)
    return start <= day <= end
