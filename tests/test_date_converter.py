# tests/test_date_converter.py

from datetime import date, datetime

from charterdesk.utils.date_converter import to_display_str


def test_to_display_str():
    assert to_display_str(date(2025, 3, 7)) == "2025-03-07"
    assert to_display_str(datetime(2025, 3, 7, 18, 30)) == "2025-03-07"
    assert to_display_str(None) == "-"
    assert to_display_str("someday") == "someday"
