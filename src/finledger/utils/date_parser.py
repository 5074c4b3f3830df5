"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def _relative_date(text: str, today: date) -> date | None:
    fixed = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in fixed:
        return fixed[text]

    prefix, _, period = text.partition(" ")
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)
    year_start = today.replace(month=1, day=1)
    shift = {"last": -1, "this": 0, "next": 1}.get(prefix)
    if shift is None:
        return None

    if period == "week":
        return week_start + timedelta(weeks=shift)
    if period == "month":
        return month_start + relativedelta(months=shift)
    if period == "year":
        return year_start + relativedelta(years=shift)
    if prefix == "last" and period in WEEKDAYS:
        days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7 or 7
        return today - timedelta(days=days_ago)
    return None


def parse_date(date_str: str, day_first: bool = False) -> date:
    """Parse a date string into a date object.

    Supports ISO dates, free-form dates ("January 15, 2024") and relative
    dates ("today", "yesterday", "last month", "this week", "last friday").
    ``day_first`` reads ambiguous numeric dates such as ``03/01/2024`` as
    3 January rather than 1 March; ISO ``YYYY-MM-DD`` is unaffected.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    relative = _relative_date(text, date.today())
    if relative is not None:
        return relative

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return date_parser.parse(text, dayfirst=day_first).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from None


def month_range(month: str | date | None = None) -> tuple[date, date]:
    """First and last day of a month given as ``YYYY-MM``, a date, or None for now."""
    if month is None:
        anchor = date.today()
    elif isinstance(month, date):
        anchor = month
    else:
        try:
            year, mon = (int(part) for part in month.strip().split("-", 1))
            anchor = date(year, mon, 1)
        except ValueError:
            raise ValueError(f"Invalid month '{month}', expected YYYY-MM") from None
    start = anchor.replace(day=1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end
