# charterdesk/utils/date_converter.py

from datetime import date, datetime
from typing import Optional, Union

from charterdesk.constants import DATE_FORMAT


def to_display_str(value: Optional[Union[date, datetime]]) -> str:
    """A date as YYYY-MM-DD for tables and documents; missing dates show as '-'."""
    if value is None:
        return "-"
    if not isinstance(value, (date, datetime)):
        return str(value)
    return value.strftime(DATE_FORMAT)

def from_qdate(q_date: 'QDate') -> date:
    """Converts a PyQt QDate into a Python date."""
    return q_date.toPyDate()

def to_qdate(g_date: Optional[Union[date, datetime]]) -> 'QDate':
    """Converts a Python date into a PyQt QDate; None gives today."""
    from PyQt5.QtCore import QDate
    if g_date is None:
        return QDate.currentDate()
    return QDate(g_date.year, g_date.month, g_date.day)
