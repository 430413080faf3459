# warehouse_ledger/utils/date_converter.py

from datetime import date, datetime
from typing import Optional, Union

from warehouse_ledger.constants import DATE_FORMAT

DISPLAY_DATE_FORMAT = "%m/%d/%Y"


def to_display_str(value: Optional[Union[date, datetime]]) -> str:
    """Formats a date the way reports and CSV exports show it (MM/DD/YYYY)."""
    if value is None:
        return "-"
    if not isinstance(value, (date, datetime)):
        return str(value)
    return value.strftime(DISPLAY_DATE_FORMAT)


def to_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Accepts a date, a datetime or an ISO (YYYY-MM-DD) string and returns a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.split("T")[0].split(" ")[0], DATE_FORMAT).date()
        except ValueError:
            raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD.")
    raise ValueError(f"Unsupported date value: {value!r}")


def month_bounds(as_of: date) -> tuple:
    """First day of as_of's month and first day of the following month."""
    first = as_of.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return first, next_first
