"""Weekday parsing and future date generation for recurring routes."""
import logging
import re
from datetime import date, datetime, timedelta

# Sunday based numbering, as used by the booking site
WEEKDAY_ORDINALS: dict[str, int] = {
    "Domingo": 0,
    "Segunda-feira": 1,
    "Terça-feira": 2,
    "Quarta-feira": 3,
    "Quinta-feira": 4,
    "Sexta-feira": 5,
    "Sábado": 6,
}

_TRAILING_PARENTHESIS = re.compile(r"\(([^)]+)\)$")


def weekday_from_route_name(route_name: str) -> str | None:
    """Return the weekday label in trailing parentheses, e.g. "X > Y (Sábado)" -> "Sábado"."""
    match = _TRAILING_PARENTHESIS.search(route_name)
    if match and match.group(1) in WEEKDAY_ORDINALS:
        return match.group(1)
    logging.warning('Could not extract a valid day of the week from route name: "%s"', route_name)
    return None


def _sunday_based_ordinal(d: date) -> int:
    return d.isoweekday() % 7


def next_dates(weekday: str, count: int = 4, today: date | None = None) -> list[date]:
    """Generate `count` upcoming dates falling on `weekday`, one week apart.

    The first date is today when today already is that weekday. Unknown labels are
    logged and yield an empty list.
    """
    if weekday not in WEEKDAY_ORDINALS:
        logging.error("Invalid target day name provided: %s", weekday)
        return []
    if count <= 0:
        return []

    today = today or date.today()
    offset = (WEEKDAY_ORDINALS[weekday] - _sunday_based_ordinal(today) + 7) % 7
    first = today + timedelta(days=offset)
    return [first + timedelta(weeks=i) for i in range(count)]


def format_date_br(value: str | date | None) -> str | None:
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if not value:
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%d/%m/%Y")
    except ValueError:
        return value
